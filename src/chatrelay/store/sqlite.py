"""SQLite message store backend.

Provides persistent per-user chat history in a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from ..errors import PersistenceError
from .base import MessageStore
from .models import Message, Role


class SQLiteMessageStore(MessageStore):
    """SQLite-backed message store.

    One ``messages`` table partitioned by ``user_id``. Every query filters on
    the caller's user id; ``seq`` breaks timestamp ties in insertion order.
    """

    def __init__(self, path: str | Path = "./chatrelay.db"):
        super().__init__()
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database connection and create the schema."""
        if self._connection is not None:
            return
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._create_schema()
            await self._load_last_timestamp()
        except (aiosqlite.Error, OSError) as e:
            if self._connection is not None:
                await self._connection.close()
                self._connection = None
            raise PersistenceError(f"Cannot open message store at {self._db_path}: {e}") from e

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                user_id TEXT NOT NULL,
                role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
                content TEXT NOT NULL,
                timestamp TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_user
            ON messages(user_id, timestamp, seq)
        """)

        await self._connection.commit()

    async def _load_last_timestamp(self) -> None:
        """Resume the timestamp sequence after a restart."""
        async with self._connection.execute("SELECT MAX(timestamp) FROM messages") as cursor:
            row = await cursor.fetchone()
        if row and row[0]:
            self._last_timestamp = datetime.fromisoformat(row[0])

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise PersistenceError("Message store is not connected")
        return self._connection

    async def append(self, user_id: str, role: Role | str, content: str) -> Message:
        connection = self._require_connection()
        message = Message(
            user_id=user_id,
            role=Role(role),
            content=content,
            timestamp=self._next_timestamp(),
        )
        try:
            await connection.execute(
                """
                INSERT INTO messages (id, user_id, role, content, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.user_id,
                    message.role.value,
                    message.content,
                    message.timestamp.isoformat(timespec="microseconds"),
                ),
            )
            await connection.commit()
        except aiosqlite.Error as e:
            await connection.rollback()
            raise PersistenceError(f"Failed to append message for {user_id}: {e}") from e
        return message

    async def list(self, user_id: str) -> list[Message]:
        connection = self._require_connection()
        try:
            async with connection.execute(
                """
                SELECT id, user_id, role, content, timestamp
                FROM messages
                WHERE user_id = ?
                ORDER BY timestamp ASC, seq ASC
                """,
                (user_id,)
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to read messages for {user_id}: {e}") from e

        return [
            Message(
                id=message_id,
                user_id=owner,
                role=Role(role),
                content=content,
                timestamp=datetime.fromisoformat(ts),
            )
            for message_id, owner, role, content, ts in rows
        ]

    async def delete_all(self, user_id: str) -> int:
        connection = self._require_connection()
        try:
            cursor = await connection.execute(
                "DELETE FROM messages WHERE user_id = ?",
                (user_id,)
            )
            await connection.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to delete messages for {user_id}: {e}") from e
        return cursor.rowcount

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
