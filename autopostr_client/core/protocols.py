"""Boundary Protocols — contracts between core services and external capabilities.

Invariants:
    - Services NEVER import a concrete clock, store, or transport
    - All IO accessed through these Protocol types
    - Implementations provided by infrastructure (or tests) via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes need no inheritance
    - Clock works in seconds (asyncio convention); callers convert from ms
    - KeyValueStore is async: the durable implementation does database IO
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, Union

TimerCallback = Callable[[], Union[None, Awaitable[None]]]


class TimerHandle(Protocol):
    """Cancellation handle returned by Clock.after / Clock.every."""
    def cancel(self) -> None: ...


class Clock(Protocol):
    """Time source and timer scheduler."""
    def now(self) -> float: ...
    async def sleep(self, seconds: float) -> None: ...
    def after(self, seconds: float, callback: TimerCallback) -> TimerHandle: ...
    def every(self, seconds: float, callback: TimerCallback) -> TimerHandle: ...


class KeyValueStore(Protocol):
    """Durable string-keyed storage surviving restarts."""
    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def delete(self, key: str) -> None: ...


class Transport(Protocol):
    """Sends a request body to the fixed endpoint; returns the response text."""
    async def send(self, url: str, body: str) -> str: ...
    async def probe(self, url: str) -> str: ...


class Notifier(Protocol):
    """User-facing notices (toasts). Used by callers, optional for the core."""
    def notify(self, message: str, level: str) -> None: ...


def now_ms(clock: Clock) -> int:
    """Clock time as integer epoch milliseconds."""
    return int(clock.now() * 1000)
