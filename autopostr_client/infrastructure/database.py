"""Database Session Manager — async engine and sessions backing the durable KV store.

Invariants:
    - A session that raises is rolled back before the error leaves the block
    - Every SQLAlchemy failure leaves as StorageError (core/errors.py), with
      the most specific known description
    - Non-SQLite engines ping pooled connections before use

Design Decisions:
    - Instance owned by ClientContext (bootstrap.py), not a module singleton
    - expire_on_commit=False: rows stay readable after commit in async code
    - init_schema() for local SQLite; alembic owns schema everywhere else
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from autopostr_client.core.errors import StorageError
from autopostr_client.db.base import Base
from autopostr_client.models.kv_entry import KVEntry  # noqa: F401

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_FAILURE_DESCRIPTIONS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_storage_error(exc: SQLAlchemyError) -> StorageError:
    for exc_type, message, operation in _FAILURE_DESCRIPTIONS:
        if isinstance(exc, exc_type):
            return StorageError(message, operation)
    return StorageError(str(exc), "unknown")


class DatabaseSessionManager:
    """Async engine + session factory for the kv_entries table."""

    def __init__(self, database_url: str, **engine_kwargs):
        if not database_url.startswith("sqlite"):
            engine_kwargs.setdefault("pool_pre_ping", True)
            engine_kwargs.setdefault("pool_recycle", 3600)
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"KV store {type(e).__name__}: {e}")
                raise to_storage_error(e) from e

    async def init_schema(self) -> None:
        """Create missing tables (local SQLite / tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """True if a trivial query succeeds (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"KV store health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
