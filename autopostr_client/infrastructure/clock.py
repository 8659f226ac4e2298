"""Asyncio Clock — wall-clock time and event-loop timers.

Invariants:
    - now() is epoch seconds (time.time), so persisted expiries survive restarts
    - sleep() suspends only the awaiting task (never blocks the loop)
    - every() reschedules BEFORE invoking the callback: a slow or failing tick
      never stops the period
    - Coroutine callbacks run as background tasks; their exceptions are logged

Design Decisions:
    - loop.call_later over one task per timer: cancellation is a handle call,
      no task to await on shutdown
"""

import asyncio
import inspect
import logging
import time

from autopostr_client.core.protocols import TimerCallback

logger = logging.getLogger(__name__)

_background_tasks: set[asyncio.Task] = set()


def run_callback(callback: TimerCallback) -> None:
    """Invoke a timer callback; coroutine results become tracked background tasks."""
    result = callback()
    if inspect.isawaitable(result):
        task = asyncio.ensure_future(result)
        _background_tasks.add(task)
        task.add_done_callback(_finish_background_task)


def _finish_background_task(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Timer callback failed: {exc}", exc_info=exc)


class _PeriodicTimer:
    """Self-rescheduling call_later chain."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, interval: float, callback: TimerCallback,
    ):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        run_callback(self._callback)

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioClock:
    """Clock backed by time.time() and the running event loop."""

    def now(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def after(self, seconds: float, callback: TimerCallback) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(seconds, run_callback, callback)

    def every(self, seconds: float, callback: TimerCallback) -> _PeriodicTimer:
        return _PeriodicTimer(asyncio.get_running_loop(), seconds, callback)
