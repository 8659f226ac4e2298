"""Retry Executor — drives repeated attempts with exponential backoff and a failure budget.

Invariants:
    - Attempts are numbered 1..policy.max_attempts; never a (max_attempts + 1)th
    - After a failed attempt n < max_attempts, wait policy.delay_for(n) ms, then retry
    - After the last failed attempt raise AggregatedRetryFailure(attempts, last_error)
    - TransportError, ParseError and LogicalFailure are retried uniformly
      (unless the policy opts out of retrying logical failures)
    - The backoff wait suspends this call only; cancelling the awaiting task
      cancels the wait

Design Decisions:
    - Only ClientError is retried: anything else is a programming error and propagates
    - Waits go through Clock.sleep so tests control time
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from autopostr_client.core.errors import (
    AggregatedRetryFailure, ClientError, ErrorContext,
)
from autopostr_client.core.protocols import Clock
from autopostr_client.core.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs a producer until it succeeds or the policy's budget is spent."""

    def __init__(self, clock: Clock):
        self._clock = clock

    async def execute(
        self,
        producer: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        context: ErrorContext | None = None,
    ) -> T:
        last_error: ClientError | None = None
        operation = context.operation if context else None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                result = await producer()
            except ClientError as e:
                last_error = e
                e.context.attempt = attempt
                e.context.operation = e.context.operation or operation
                logger.warning(
                    f"API request failed (attempt {attempt}/{policy.max_attempts}): {e.message}",
                    extra={
                        "operation": operation, "attempt": attempt,
                        "max_attempts": policy.max_attempts, "error_code": e.code,
                    },
                )
                if not policy.should_retry(e):
                    raise
                if attempt == policy.max_attempts:
                    break
                await self._backoff(policy, attempt, operation)
                continue
            if attempt > 1:
                logger.info(
                    "API request succeeded after retry",
                    extra={"operation": operation, "attempt": attempt},
                )
            return result

        raise AggregatedRetryFailure(
            policy.max_attempts, last_error, context=context,
        ) from last_error

    async def _backoff(self, policy: RetryPolicy, attempt: int, operation: str | None) -> None:
        delay_ms = policy.delay_for(attempt)
        logger.debug(
            f"Retrying after {delay_ms:.0f}ms",
            extra={"operation": operation, "attempt": attempt, "delay_ms": delay_ms},
        )
        await self._clock.sleep(delay_ms / 1000)
