"""Client-held conversation state.

The rendered conversation is an ordered list of entries. A send is a
two-phase transition: the user entry and a pending bot placeholder tagged
with a correlation id are appended at once, then the placeholder is replaced
in place by a confirmed or an error entry when the request finishes. Every
send therefore ends in exactly one rendered bot entry, and nothing here
raises to the caller.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any
from uuid import uuid4

from loguru import logger

from .session import ClientSession
from .transport import ChatTransport, TransportError

NO_RESPONSE_TEXT = "No response from the assistant."
CONNECTION_ERROR_TEXT = (
    "Error connecting to the assistant. Please check your connection or server status."
)


class EntryStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ERROR = "error"


@dataclass(frozen=True)
class ConversationEntry:
    """A rendered chat bubble."""

    sender: str  # "user" or "bot"
    text: str
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: EntryStatus = EntryStatus.CONFIRMED
    correlation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"sender": self.sender, "text": self.text, "time": self.time.isoformat()}


class ClientConversationState:
    """Ordered turn list with optimistic sends and a single pending flag.

    While ``pending`` is True further sends are refused; the UI is expected
    to disable its input, nothing on the server enforces it.
    """

    def __init__(
        self,
        transport: ChatTransport,
        session: ClientSession,
        provider: str | None = None,
    ):
        self._transport = transport
        self._session = session
        self._provider = provider
        self._entries: list[ConversationEntry] = []
        self._pending = False

    @property
    def pending(self) -> bool:
        """Typing indicator: a send is in flight."""
        return self._pending

    @property
    def entries(self) -> list[ConversationEntry]:
        """Rendered entries; the pending placeholder is shown as the typing indicator instead."""
        return [entry for entry in self._entries if entry.status != EntryStatus.PENDING]

    async def send(self, text: str) -> ConversationEntry | None:
        """Send ``text`` and return the bot entry that answered it.

        Returns None without side effects when ``text`` is blank or a send is
        already in flight.
        """
        if self._pending or not text.strip():
            return None

        correlation_id = uuid4().hex
        self._entries.append(ConversationEntry(sender="user", text=text))
        self._entries.append(
            ConversationEntry(
                sender="bot",
                text="",
                status=EntryStatus.PENDING,
                correlation_id=correlation_id,
            )
        )
        self._pending = True

        try:
            data = await self._transport.send_message(text, provider=self._provider)
            reply = data.get("reply")
            resolved = ConversationEntry(
                sender="bot",
                text=reply if isinstance(reply, str) and reply else NO_RESPONSE_TEXT,
                correlation_id=correlation_id,
            )
        except TransportError as e:
            logger.warning("Send failed: {}", e)
            resolved = ConversationEntry(
                sender="bot",
                text=CONNECTION_ERROR_TEXT,
                status=EntryStatus.ERROR,
                correlation_id=correlation_id,
            )
        finally:
            self._pending = False

        self._resolve(correlation_id, resolved)
        return resolved

    def _resolve(self, correlation_id: str, resolved: ConversationEntry) -> None:
        for index, entry in enumerate(self._entries):
            if entry.correlation_id == correlation_id and entry.status == EntryStatus.PENDING:
                self._entries[index] = replace(resolved, time=datetime.now(timezone.utc))
                return
        # The list was replaced (load/clear) while the request was in flight
        self._entries.append(resolved)

    async def load(self) -> bool:
        """Replace the whole list with the server history.

        Returns False (and keeps the current list) when unauthenticated or on failure.
        """
        if not self._session.authenticated:
            return False
        try:
            history = await self._transport.fetch_history()
        except TransportError as e:
            logger.warning("Loading history failed: {}", e)
            return False

        self._entries = [self._from_history(item) for item in history]
        return True

    @staticmethod
    def _from_history(item: dict[str, Any]) -> ConversationEntry:
        timestamp = item.get("timestamp")
        try:
            time = datetime.fromisoformat(timestamp) if timestamp else datetime.now(timezone.utc)
        except (TypeError, ValueError):
            time = datetime.now(timezone.utc)
        return ConversationEntry(
            sender="user" if item.get("role") == "user" else "bot",
            text=str(item.get("content", "")),
            time=time,
        )

    async def clear(self) -> bool:
        """Empty the conversation.

        Authenticated: only after the server confirmed the delete.
        Unauthenticated: immediately, without a server call.
        """
        if not self._session.authenticated:
            self._entries = []
            return True
        try:
            await self._transport.clear_history()
        except TransportError as e:
            logger.warning("Clearing history failed: {}", e)
            return False
        self._entries = []
        return True

    def export_local(self) -> bytes:
        """Serialize the rendered entries (the unauthenticated export)."""
        document = [entry.to_dict() for entry in self.entries]
        return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

    async def export(self) -> bytes | None:
        """Server export when authenticated, local export otherwise; None on failure."""
        if not self._session.authenticated:
            return self.export_local()
        try:
            return await self._transport.export_history()
        except TransportError as e:
            logger.warning("Exporting history failed: {}", e)
            return None
