"""Per-user message store module.

Provides the durable, per-user ordered log of chat turns.
"""

from .base import MessageStore
from .factory import create_message_store
from .in_memory import InMemoryMessageStore
from .models import Message, Role
from .sqlite import SQLiteMessageStore

__all__ = [
    "InMemoryMessageStore",
    "Message",
    "MessageStore",
    "Role",
    "SQLiteMessageStore",
    "create_message_store",
]
