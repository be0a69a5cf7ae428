"""Tests for the SQL binding store against a temporary SQLite database."""

from datetime import datetime, timedelta

import pytest

from shortlink.core.exceptions import DatabaseError, DuplicateIDError, NotFoundError
from shortlink.db.models import Binding
from shortlink.db.repository import SQLBindingStore
from shortlink.db.session import create_tables, make_session_maker
from shortlink.db.sqlite_adapter import SQLiteAdapter, get_database_adapter

BOUND_AT = datetime(2026, 1, 1, 0, 0, 0)


def make_binding(identifier: str = "abc123", **values) -> Binding:
    values.setdefault("url", "https://example.com")
    values.setdefault("bound_at", BOUND_AT)
    return Binding(id=identifier, **values)


@pytest.fixture
async def session_maker(tmp_path):
    engine = SQLiteAdapter().create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(engine)
    yield make_session_maker(engine)
    await engine.dispose()


@pytest.fixture
async def store(session_maker):
    async with session_maker() as session:
        yield SQLBindingStore(session)


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_then_peek(self, store):
        expire_on = BOUND_AT + timedelta(days=1)
        await store.insert(make_binding(expire_on=expire_on, max_requests=3, expired_url="https://example.com/x"))

        binding = await store.peek("abc123")
        assert binding.url == "https://example.com"
        assert binding.bound_at == BOUND_AT
        assert binding.expire_on == expire_on
        assert binding.max_requests == 3
        assert binding.counter == 0
        assert binding.expired_url == "https://example.com/x"
        assert binding.exhausted_url == ""

    @pytest.mark.asyncio
    async def test_insert_duplicate(self, store, session_maker):
        await store.insert(make_binding())

        async with session_maker() as other_session:
            with pytest.raises(DuplicateIDError):
                await SQLBindingStore(other_session).insert(make_binding(url="https://example.com/other"))

        assert (await store.peek("abc123")).url == "https://example.com"


class TestGetAndPeek:
    @pytest.mark.asyncio
    async def test_get_increments_counter(self, store):
        await store.insert(make_binding())

        assert (await store.get("abc123")).counter == 1
        assert (await store.get("abc123")).counter == 2
        assert (await store.peek("abc123")).counter == 2

    @pytest.mark.asyncio
    async def test_peek_does_not_increment(self, store):
        await store.insert(make_binding())
        await store.peek("abc123")
        assert (await store.peek("abc123")).counter == 0

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            await store.get("nope00")
        with pytest.raises(NotFoundError):
            await store.peek("nope00")

    @pytest.mark.asyncio
    async def test_never_expiring_binding(self, store):
        await store.insert(make_binding())
        assert (await store.peek("abc123")).expire_on is None


class TestUpsert:
    @pytest.mark.asyncio
    async def test_upsert_creates(self, store):
        await store.upsert(make_binding(max_requests=2))
        assert (await store.peek("abc123")).max_requests == 2

    @pytest.mark.asyncio
    async def test_upsert_keeps_counter_and_bound_at(self, store):
        await store.insert(make_binding())
        await store.get("abc123")

        await store.upsert(make_binding(
            url="https://example.com/new",
            bound_at=BOUND_AT + timedelta(days=5),
            ttl=60,
            expire_on=BOUND_AT + timedelta(days=5, seconds=60),
            max_requests=9,
        ))

        binding = await store.peek("abc123")
        assert binding.url == "https://example.com/new"
        assert binding.expire_on == BOUND_AT + timedelta(days=5, seconds=60)
        assert binding.max_requests == 9
        assert binding.counter == 1
        assert binding.bound_at == BOUND_AT

    @pytest.mark.asyncio
    async def test_upsert_retries_when_created_concurrently(self, store, session_maker, monkeypatch):
        flush = store.session.flush
        raced = []

        async def flush_after_concurrent_create(*args, **kwargs):
            if not raced:
                raced.append(True)
                async with session_maker() as other_session:
                    await SQLBindingStore(other_session).insert(make_binding(url="https://example.com/first"))
            await flush(*args, **kwargs)

        monkeypatch.setattr(store.session, "flush", flush_after_concurrent_create)

        await store.upsert(make_binding(
            url="https://example.com/second",
            bound_at=BOUND_AT + timedelta(days=1),
            max_requests=4,
        ))

        binding = await store.peek("abc123")
        assert raced == [True]
        assert binding.url == "https://example.com/second"
        assert binding.max_requests == 4
        assert binding.bound_at == BOUND_AT
        assert binding.counter == 0

    @pytest.mark.asyncio
    async def test_unstorable_value_rolls_back(self, store):
        with pytest.raises(DatabaseError):
            await store.upsert(make_binding(max_requests=2**64))

        await store.insert(make_binding("def456"))
        assert (await store.peek("def456")).max_requests == 0
        with pytest.raises(NotFoundError):
            await store.peek("abc123")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.insert(make_binding())
        await store.delete("abc123")
        with pytest.raises(NotFoundError):
            await store.peek("abc123")

    @pytest.mark.asyncio
    async def test_delete_unknown(self, store):
        with pytest.raises(NotFoundError):
            await store.delete("nope00")

    @pytest.mark.asyncio
    async def test_delete_resets_counter(self, store):
        await store.insert(make_binding())
        await store.get("abc123")
        await store.delete("abc123")

        await store.insert(make_binding())
        assert (await store.peek("abc123")).counter == 0


def test_adapter_selection():
    assert isinstance(get_database_adapter("sqlite+aiosqlite:///./x.db"), SQLiteAdapter)
    assert get_database_adapter("sqlite+aiosqlite:///:memory:").in_memory
    assert not get_database_adapter("sqlite+aiosqlite:///./x.db").in_memory
    assert get_database_adapter().get_dialect_name() == "sqlite"
