"""Tests for key-value stores — in-memory and SQL-backed (SQLite via aiosqlite).

Invariants:
    - Missing key → None; delete of missing key is a no-op
    - SQL store survives an engine restart (durable across process restarts)
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from autopostr_client.core.errors import StorageError
from autopostr_client.infrastructure.database import (
    DatabaseSessionManager, to_storage_error,
)
from autopostr_client.infrastructure.kv_store import (
    InMemoryKeyValueStore, SqlKeyValueStore,
)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}"


@pytest.fixture
async def db_manager(database_url):
    manager = DatabaseSessionManager(database_url)
    await manager.init_schema()
    yield manager
    await manager.dispose()


# ─── In-memory ──────────────────────────────────────────────────

async def test_memory_store_roundtrip():
    store = InMemoryKeyValueStore()
    assert await store.get("userEmail") is None
    await store.set("userEmail", "a@b.com")
    assert await store.get("userEmail") == "a@b.com"
    await store.delete("userEmail")
    await store.delete("userEmail")
    assert store.snapshot() == {}


# ─── SQL ────────────────────────────────────────────────────────

async def test_sql_store_get_set_overwrite(db_manager):
    store = SqlKeyValueStore(db_manager)
    assert await store.get("sessionExpiry") is None
    await store.set("sessionExpiry", "1")
    await store.set("sessionExpiry", "2")
    assert await store.get("sessionExpiry") == "2"


async def test_sql_store_delete(db_manager):
    store = SqlKeyValueStore(db_manager)
    await store.set("userEmail", "a@b.com")
    await store.delete("userEmail")
    await store.delete("never-set")
    assert await store.get("userEmail") is None


async def test_sql_store_survives_restart(database_url):
    first = DatabaseSessionManager(database_url)
    await first.init_schema()
    await SqlKeyValueStore(first).set("userEmail", "a@b.com")
    await first.dispose()

    second = DatabaseSessionManager(database_url)
    try:
        assert await SqlKeyValueStore(second).get("userEmail") == "a@b.com"
    finally:
        await second.dispose()


async def test_missing_schema_surfaces_storage_error(database_url):
    manager = DatabaseSessionManager(database_url)
    try:
        with pytest.raises(StorageError):
            await SqlKeyValueStore(manager).get("userEmail")
    finally:
        await manager.dispose()


async def test_health_check(db_manager):
    assert await db_manager.health_check() is True


def test_sqlalchemy_errors_mapped_most_specific_first():
    integrity = IntegrityError("INSERT", {}, Exception("UNIQUE"))
    operational = OperationalError("SELECT", {}, Exception("locked"))
    assert to_storage_error(integrity).message == (
        "Storage commit failed: Integrity constraint violated"
    )
    assert to_storage_error(operational).operation == "execute"
    assert to_storage_error(SQLAlchemyError("odd")).operation == "unknown"
