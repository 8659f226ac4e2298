"""KV Entry ORM — one durable string entry of the client key-value store.

Invariants:
    - key is the primary key (at most one value per key)
    - value is non-nullable text; deleting a key removes the row
    - updated_at refreshed on every write
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from autopostr_client.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KVEntry(Base):
    """Durable key-value row (session entries and other client state)."""
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utcnow, onupdate=_utcnow,
    )
