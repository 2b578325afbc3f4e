from .session import ClientSession, UserProfile
from .state import ClientConversationState, ConversationEntry, EntryStatus
from .storage import InMemoryKeyValueStore, JSONFileKeyValueStore, KeyValueStore
from .transport import ChatTransport, TransportError

__all__ = [
    "ChatTransport",
    "ClientConversationState",
    "ClientSession",
    "ConversationEntry",
    "EntryStatus",
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "TransportError",
    "UserProfile",
]
