"""Unit and property-based tests for the message store module."""
import asyncio
import json

import aiosqlite
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chatrelay.errors import PersistenceError
from chatrelay.store import (
    InMemoryMessageStore,
    Message,
    MessageStore,
    Role,
    SQLiteMessageStore,
    create_message_store,
)


@pytest.fixture(params=["memory", "sqlite"])
async def any_store(request, tmp_path):
    """Yield a connected store of each backend type."""
    if request.param == "memory":
        backend = InMemoryMessageStore()
    else:
        backend = SQLiteMessageStore(tmp_path / "messages.db")
    await backend.connect()
    yield backend
    await backend.disconnect()


class TestMessageStoreInterface:
    def test_store_is_abstract(self):
        """Test that MessageStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            MessageStore()  # type: ignore


class TestMessageStoreBackends:
    """Behaviour every backend must share."""

    @pytest.mark.asyncio
    async def test_append_returns_stored_message(self, any_store):
        message = await any_store.append("u1", Role.USER, "Hello")

        assert message.user_id == "u1"
        assert message.role == Role.USER
        assert message.content == "Hello"
        assert message.timestamp.tzinfo is not None
        assert await any_store.list("u1") == [message]

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_timestamp(self, any_store):
        await any_store.append("u1", "user", "first")
        await any_store.append("u1", "assistant", "second")
        await any_store.append("u1", "user", "third")

        messages = await any_store.list("u1")

        assert [m.content for m in messages] == ["first", "second", "third"]
        timestamps = [m.timestamp for m in messages]
        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == 3

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, any_store):
        await any_store.append("alice", Role.USER, "from alice")
        await any_store.append("bob", Role.USER, "from bob")

        alice = await any_store.list("alice")

        assert [m.content for m in alice] == ["from alice"]
        assert all(m.user_id == "alice" for m in alice)

    @pytest.mark.asyncio
    async def test_delete_all_only_touches_one_user(self, any_store):
        await any_store.append("alice", Role.USER, "a1")
        await any_store.append("alice", Role.ASSISTANT, "a2")
        await any_store.append("bob", Role.USER, "b1")

        deleted = await any_store.delete_all("alice")

        assert deleted == 2
        assert await any_store.list("alice") == []
        assert len(await any_store.list("bob")) == 1

    @pytest.mark.asyncio
    async def test_list_unknown_user_is_empty(self, any_store):
        assert await any_store.list("nobody") == []
        assert await any_store.delete_all("nobody") == 0

    @pytest.mark.asyncio
    async def test_export_deserializes_to_list(self, any_store):
        await any_store.append("u1", Role.USER, "Hello")
        await any_store.append("u1", Role.ASSISTANT, "Hi there ✨")
        await any_store.append("u2", Role.USER, "not mine")

        document = json.loads(await any_store.export("u1"))

        assert [Message.model_validate(item) for item in document] == await any_store.list("u1")

    @pytest.mark.asyncio
    async def test_export_of_empty_history(self, any_store):
        assert json.loads(await any_store.export("u1")) == []

    @pytest.mark.asyncio
    async def test_invalid_role_is_rejected(self, any_store):
        with pytest.raises(ValueError):
            await any_store.append("u1", "system", "nope")


class TestSQLiteMessageStore:
    @pytest.mark.asyncio
    async def test_messages_survive_reconnect(self, tmp_path):
        path = tmp_path / "nested" / "chat.db"
        async with SQLiteMessageStore(path) as first:
            written = await first.append("u1", Role.USER, "persist me")

        async with SQLiteMessageStore(path) as second:
            later = await second.append("u1", Role.ASSISTANT, "after restart")
            messages = await second.list("u1")

        assert messages[0] == written
        assert messages[1] == later
        assert later.timestamp > written.timestamp

    @pytest.mark.asyncio
    async def test_operations_require_connection(self, tmp_path):
        store = SQLiteMessageStore(tmp_path / "chat.db")

        with pytest.raises(PersistenceError):
            await store.append("u1", Role.USER, "Hello")
        with pytest.raises(PersistenceError):
            await store.list("u1")

    @pytest.mark.asyncio
    async def test_unopenable_path_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = SQLiteMessageStore(blocker / "chat.db")

        with pytest.raises(PersistenceError):
            await store.connect()

    @pytest.mark.asyncio
    async def test_failed_schema_setup_can_be_retried(self, tmp_path):
        class FlakySchemaStore(SQLiteMessageStore):
            attempts = 0

            async def _create_schema(self):
                self.attempts += 1
                if self.attempts == 1:
                    raise aiosqlite.OperationalError("database is locked")
                await super()._create_schema()

        store = FlakySchemaStore(tmp_path / "chat.db")

        with pytest.raises(PersistenceError):
            await store.connect()
        with pytest.raises(PersistenceError, match="not connected"):
            await store.list("u1")

        await store.connect()
        try:
            await store.append("u1", Role.USER, "Hello")
            assert [m.content for m in await store.list("u1")] == ["Hello"]
        finally:
            await store.disconnect()


class TestMessageStoreFactory:
    def test_create_memory_store(self):
        store = create_message_store("memory")

        assert isinstance(store, InMemoryMessageStore)
        assert store.backend_type == "memory"

    def test_create_sqlite_store(self, tmp_path):
        store = create_message_store("sqlite", path=tmp_path / "chat.db")

        assert isinstance(store, SQLiteMessageStore)
        assert store.db_path == tmp_path / "chat.db"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported message store backend"):
            create_message_store("redis")


user_ids = st.sampled_from(["alice", "bob", "carol"])
appends = st.lists(st.tuples(user_ids, st.sampled_from(list(Role)), st.text(max_size=20)), max_size=30)


@settings(max_examples=50)
@given(appends)
def test_list_contains_exactly_the_users_own_appends(operations):
    """Property test: list(A) holds A's appends, in append order, and nothing else."""
    async def run() -> None:
        store = InMemoryMessageStore()
        for user_id, role, content in operations:
            await store.append(user_id, role, content)

        for user_id in ("alice", "bob", "carol"):
            expected = [(role, content) for owner, role, content in operations if owner == user_id]
            stored = await store.list(user_id)
            assert [(m.role, m.content) for m in stored] == expected
            assert all(m.user_id == user_id for m in stored)

    asyncio.run(run())
