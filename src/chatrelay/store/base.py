"""Abstract base class for message store backends.

This module defines the interface for per-user chat history storage.
The abstraction hides:
- Storage format (rows, in-process lists)
- Persistence mechanism (file, database, in-memory)
- Connection management

Every operation takes the owning user id and touches only that user's
messages; no method can read or modify another user's partition.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any

from .models import Message, Role


class MessageStore(ABC):
    """Abstract message store backend."""

    def __init__(self) -> None:
        self._last_timestamp: datetime | None = None

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    @abstractmethod
    async def append(self, user_id: str, role: Role | str, content: str) -> Message:
        """Atomically insert one message for ``user_id`` and return it."""

    @abstractmethod
    async def list(self, user_id: str) -> list[Message]:
        """Return all of ``user_id``'s messages, oldest first."""

    @abstractmethod
    async def delete_all(self, user_id: str) -> int:
        """Delete every message owned by ``user_id``; return how many were removed."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def export(self, user_id: str) -> bytes:
        """Serialize ``list(user_id)`` as a pretty-printed JSON document."""
        messages = await self.list(user_id)
        document = [message.model_dump(mode="json") for message in messages]
        return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

    def _next_timestamp(self) -> datetime:
        """Current UTC time, nudged forward so it is strictly after the last one issued.

        Two appends in the same clock tick would otherwise tie and lose the
        user-before-assistant order.
        """
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    async def __aenter__(self) -> "MessageStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
