"""Middleware Chain — ordered request/error transforms configured at construction.

Invariants:
    - Each middleware either transforms its input or passes it through unchanged
    - Request hooks run in configured order; error hooks run in reverse order
    - The chain is fixed after construction (no method reassignment at runtime)
    - Auth injection never overrides an identity the caller supplied
    - Error classification never swallows an error; it only annotates it

Design Decisions:
    - process_request is async: the auth middleware reads the KV store
    - process_error is sync: classification is pure and the notifier is fire-and-forget
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from autopostr_client.core.domain_types import NoticeLevel, StorageKey
from autopostr_client.core.envelope import RequestEnvelope
from autopostr_client.core.errors import (
    AggregatedRetryFailure, ClientError, LogicalFailure, ParseError, TransportError,
)
from autopostr_client.core.protocols import KeyValueStore, Notifier

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error: Please check your internet connection"
SERVER_ERROR_MESSAGE = "Server error: Please try again later"
UNAVAILABLE_MESSAGE = "Service temporarily unavailable"


class Middleware:
    """Pass-through base; subclasses override the hook they need."""

    async def process_request(self, envelope: RequestEnvelope) -> RequestEnvelope:
        return envelope

    def process_error(self, error: ClientError) -> ClientError:
        return error


class MiddlewareChain:
    """Applies a fixed sequence of middlewares."""

    def __init__(self, middlewares: Sequence[Middleware] = ()):
        self._middlewares = tuple(middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    async def process_request(self, envelope: RequestEnvelope) -> RequestEnvelope:
        for middleware in self._middlewares:
            envelope = await middleware.process_request(envelope)
        return envelope

    def process_error(self, error: ClientError) -> ClientError:
        for middleware in reversed(self._middlewares):
            error = middleware.process_error(error)
        return error


class AuthInjectionMiddleware(Middleware):
    """Adds the persisted session identity as payload["email"] when absent."""

    def __init__(self, store: KeyValueStore, field: str = "email"):
        self._store = store
        self._field = field

    async def process_request(self, envelope: RequestEnvelope) -> RequestEnvelope:
        if envelope.payload.get(self._field):
            return envelope
        identity = await self._store.get(StorageKey.USER_EMAIL.value)
        if not identity:
            return envelope
        return replace(
            envelope.with_payload(**{self._field: identity}), auth_identity=identity,
        )


def classify_error(error: ClientError) -> str:
    """User-facing message for a failure (last cause for aggregated failures)."""
    cause = error.last_error if isinstance(error, AggregatedRetryFailure) else error
    if isinstance(cause, TransportError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(cause, ParseError):
        return SERVER_ERROR_MESSAGE
    if isinstance(cause, LogicalFailure):
        return cause.message
    if isinstance(error, AggregatedRetryFailure):
        return UNAVAILABLE_MESSAGE
    return error.message


class ErrorClassificationMiddleware(Middleware):
    """Attaches a user-facing message to failures and optionally notifies."""

    def __init__(self, notifier: Notifier | None = None):
        self._notifier = notifier

    def process_error(self, error: ClientError) -> ClientError:
        if error.context.user_message is None:
            error.context.user_message = classify_error(error)
            logger.debug(
                f"Classified failure: {error.context.user_message}",
                extra={"error_code": error.code, "operation": error.context.operation},
            )
        if self._notifier is not None:
            self._notifier.notify(error.context.user_message, NoticeLevel.ERROR.value)
        return error
