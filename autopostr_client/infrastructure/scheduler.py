"""Scheduler — named, cancellable periodic tasks over a Clock.

Invariants:
    - At most one periodic task per name; scheduling a name again replaces it
    - cancel() and cancel_all() are idempotent
    - Tasks are owned by whoever created the Scheduler (no ambient global timers)
"""

import logging

from autopostr_client.core.protocols import Clock, TimerCallback, TimerHandle

logger = logging.getLogger(__name__)


class Scheduler:
    """Registry of named periodic tasks started/stopped by their owner."""

    def __init__(self, clock: Clock):
        self._clock = clock
        self._tasks: dict[str, TimerHandle] = {}

    @property
    def names(self) -> list[str]:
        return sorted(self._tasks)

    def is_scheduled(self, name: str) -> bool:
        return name in self._tasks

    def schedule(self, name: str, interval_seconds: float, callback: TimerCallback) -> None:
        """Start (or restart) the named task with the given period."""
        self.cancel(name)
        self._tasks[name] = self._clock.every(interval_seconds, callback)
        logger.debug(
            f"Scheduled periodic task every {interval_seconds}s",
            extra={"task": name},
        )

    def cancel(self, name: str) -> bool:
        handle = self._tasks.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for name in list(self._tasks):
            self.cancel(name)
