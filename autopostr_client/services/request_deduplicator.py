"""Request Deduplicator — coalesces concurrent calls sharing a key into one operation.

Invariants:
    - At most one PendingRequest per key at any instant
    - The producer of a PendingRequest is invoked exactly once
    - Every caller joined to a key receives the same outcome (result or exception)
    - The entry is removed on settlement BEFORE waiting callers resume, so a call
      arriving after settlement starts a fresh operation
    - A caller cancelling its own wait never cancels the shared operation

Design Decisions:
    - Shared asyncio.Task + asyncio.shield per caller: cancellation isolation for free
    - Removal registered as the task's first done-callback: runs before the
      wake-up callbacks of awaiting callers
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """An in-flight operation callers can join."""
    key: str
    task: asyncio.Task


class RequestDeduplicator:
    """Bounds concurrent identical operations to one per key."""

    def __init__(self):
        self._pending: dict[str, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def run(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        pending = self._pending.get(key)
        if pending is None:
            pending = PendingRequest(key, asyncio.ensure_future(producer()))
            pending.task.add_done_callback(partial(self._settle, key, pending))
            self._pending[key] = pending
        else:
            logger.debug("Joining in-flight request", extra={"request_key": key})
        return await asyncio.shield(pending.task)

    def _settle(self, key: str, pending: PendingRequest, task: asyncio.Task) -> None:
        if self._pending.get(key) is pending:
            del self._pending[key]
        if not task.cancelled():
            # Mark the exception retrieved: every joined caller may have gone away
            task.exception()

