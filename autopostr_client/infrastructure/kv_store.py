"""Key-Value Stores — in-memory and SQL-backed implementations of KeyValueStore.

Invariants:
    - get() of a missing key returns None (never raises for absence)
    - set() overwrites; delete() of a missing key is a no-op
    - SqlKeyValueStore commits each write (entries survive process restarts)
    - Storage failures surface as StorageError (mapped by DatabaseSessionManager)

Design Decisions:
    - session.merge() for upsert: portable across SQLite and PostgreSQL
    - One short session per call: the store is touched a handful of times per login
"""

from sqlalchemy import delete, select

from autopostr_client.infrastructure.database import DatabaseSessionManager
from autopostr_client.models.kv_entry import KVEntry


class InMemoryKeyValueStore:
    """Process-local store (tests, ephemeral clients)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class SqlKeyValueStore:
    """Durable store over the kv_entries table."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db = db_manager

    async def get(self, key: str) -> str | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(KVEntry.value).where(KVEntry.key == key),
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        async with self._db.session() as db:
            await db.merge(KVEntry(key=key, value=value))
            await db.commit()

    async def delete(self, key: str) -> None:
        async with self._db.session() as db:
            await db.execute(delete(KVEntry).where(KVEntry.key == key))
            await db.commit()
