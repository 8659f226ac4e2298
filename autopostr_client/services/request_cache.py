"""Request Cache — TTL-keyed store of previously obtained results.

Invariants:
    - A value set with ttl_ms is visible to get() until ttl_ms elapses, then never again
    - Expired entries are evicted eagerly by their own timer or lazily on lookup
    - The expiry timer tolerates a missing or replaced entry (eviction is idempotent)
    - invalidate() removes matching entries immediately and cancels their timers
    - get() never blocks and returns a copy (cached values cannot be mutated by callers)

Design Decisions:
    - Entries private to the instance: all access through get/set/invalidate
    - Timer callback compares expires_at, so a stale timer never evicts a newer value
"""

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from autopostr_client.core.protocols import Clock, TimerHandle

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """One cached result with its absolute expiry (clock seconds)."""
    key: str
    value: Any
    expires_at: float
    timer: TimerHandle | None = None


class RequestCache:
    """TTL cache for results of read (cacheable) operations."""

    def __init__(self, clock: Clock):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock.now() >= entry.expires_at:
            self._remove(key)
            return None
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        self._remove(key)
        expires_at = self._clock.now() + ttl_ms / 1000
        entry = CacheEntry(key=key, value=copy.deepcopy(value), expires_at=expires_at)
        entry.timer = self._clock.after(
            ttl_ms / 1000, partial(self._expire, key, expires_at),
        )
        self._entries[key] = entry

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        """Remove every entry whose key matches; returns the count removed."""
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            self._remove(key)
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entries")
        return len(doomed)

    def clear(self) -> int:
        return self.invalidate(lambda _key: True)

    def _expire(self, key: str, expires_at: float) -> None:
        entry = self._entries.get(key)
        if entry is None or entry.expires_at != expires_at:
            return
        del self._entries[key]

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None and entry.timer is not None:
            entry.timer.cancel()
