"""API Client — composes middleware → cache → deduplicator → retry → transport.

Invariants:
    - Request middleware (auth injection) runs before the key is computed, so
      keys of identity-scoped calls include the identity
    - A live cache entry for a cacheable call short-circuits everything:
      no transport, no dedup, no retry
    - Two calls with the same key never run concurrent transport exchanges
    - A response counts as success only if its success field is true
    - The cache is populated once per settled operation, only for cacheable calls
      and only if the cache was not cleared while the operation was in flight
    - Failures pass through the error middleware once per settled operation
      and are re-raised to every joined caller; pending state is always released
    - Every caller receives its own copy of the result (cache hit or not)

Design Decisions:
    - Cache population happens inside the deduplicated producer: N joined
      callers produce one cache write
    - No hard deadline: the call is bounded by the retry budget plus the
      transport's per-exchange timeout
"""

import copy
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from autopostr_client.core.envelope import (
    DEFAULT_OPERATION_FIELD, CallOptions, RequestEnvelope,
    build_wire_body, parse_response_body,
)
from autopostr_client.core.errors import ClientError, ErrorContext
from autopostr_client.core.protocols import Clock, Transport
from autopostr_client.core.request_key import compute_request_key
from autopostr_client.core.retry_policy import RetryPolicy
from autopostr_client.services.middleware import Middleware, MiddlewareChain
from autopostr_client.services.request_cache import RequestCache
from autopostr_client.services.request_deduplicator import RequestDeduplicator
from autopostr_client.services.retry_executor import RetryExecutor

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MS = 30_000


class ApiClient:
    """Performs named backend operations with caching, dedup, and retry."""

    def __init__(
        self,
        transport: Transport,
        clock: Clock,
        *,
        endpoint_url: str,
        base_url: str | None = None,
        middlewares: Sequence[Middleware] = (),
        retry_policy: RetryPolicy | None = None,
        default_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        operation_field: str = DEFAULT_OPERATION_FIELD,
    ):
        self._transport = transport
        self._endpoint_url = endpoint_url
        self._base_url = base_url or endpoint_url
        self._chain = MiddlewareChain(middlewares)
        self._retry_policy = retry_policy or RetryPolicy()
        self._default_ttl_ms = default_ttl_ms
        self._operation_field = operation_field
        self._cache = RequestCache(clock)
        self._deduplicator = RequestDeduplicator()
        self._executor = RetryExecutor(clock)
        self._cache_generation = 0

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    @property
    def pending_count(self) -> int:
        return self._deduplicator.pending_count

    async def call(
        self,
        operation: str,
        payload: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
    ) -> dict[str, Any]:
        """Perform one backend operation; returns the success response body."""
        options = options or CallOptions()
        envelope = await self._chain.process_request(
            RequestEnvelope(operation=operation, payload=dict(payload or {})),
        )
        key = compute_request_key(envelope.operation, envelope.payload)

        if options.cacheable:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(
                    "Cache hit", extra={"operation": operation, "request_key": key},
                )
                return cached

        context = ErrorContext(
            operation=operation, request_key=key, identity=envelope.auth_identity,
        )
        policy = options.retry_policy or self._retry_policy
        generation = self._cache_generation

        async def produce() -> dict[str, Any]:
            try:
                result = await self._executor.execute(
                    lambda: self._exchange(envelope), policy, context,
                )
            except ClientError as e:
                raise self._chain.process_error(e)
            if options.cacheable and generation == self._cache_generation:
                ttl_ms = self._default_ttl_ms if options.ttl_ms is None else options.ttl_ms
                self._cache.set(key, result, ttl_ms)
            return result

        return copy.deepcopy(await self._deduplicator.run(key, produce))

    async def _exchange(self, envelope: RequestEnvelope) -> dict[str, Any]:
        body = build_wire_body(envelope, self._operation_field)
        text = await self._transport.send(self._endpoint_url, body)
        return parse_response_body(text)

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        return self._cache.invalidate(predicate)

    def clear_cache(self) -> int:
        self._cache_generation += 1
        return self._cache.clear()

    async def status(self) -> dict[str, Any]:
        """Probe the endpoint. Never raises."""
        try:
            text = await self._transport.probe(self._base_url)
        except ClientError as e:
            return {"online": False, "error": e.message}
        return {"online": True, "response": text}
