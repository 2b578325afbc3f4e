"""In-memory message store backend.

Simple dict-based storage, one list per user.
Data is lost when the application exits.
"""

from .base import MessageStore
from .models import Message, Role


class InMemoryMessageStore(MessageStore):
    """In-memory message store (process lifetime only).

    Suitable for development or testing.
    """

    def __init__(self) -> None:
        super().__init__()
        self._partitions: dict[str, list[Message]] = {}

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def append(self, user_id: str, role: Role | str, content: str) -> Message:
        message = Message(
            user_id=user_id,
            role=Role(role),
            content=content,
            timestamp=self._next_timestamp(),
        )
        self._partitions.setdefault(user_id, []).append(message)
        return message

    async def list(self, user_id: str) -> list[Message]:
        # Timestamps are issued in increasing order, so insertion order is already sorted
        return list(self._partitions.get(user_id, []))

    async def delete_all(self, user_id: str) -> int:
        return len(self._partitions.pop(user_id, []))

    @property
    def backend_type(self) -> str:
        return "memory"
