"""Tests for RetryExecutor — attempt budget, backoff schedule, aggregated failure.

Invariants:
    - Exactly max_attempts attempts, never more
    - Backoff after attempt n is base * 2**(n-1): 1s then 2s by default
    - Exhaustion raises AggregatedRetryFailure wrapping the last cause
"""

import pytest

from autopostr_client.core.errors import (
    AggregatedRetryFailure, ErrorContext, LogicalFailure, ParseError, TransportError,
)
from autopostr_client.core.retry_policy import RetryPolicy
from autopostr_client.services.retry_executor import RetryExecutor
from tests.services.fakes import ManualClock, drive


def _scripted(clock, *outcomes):
    """Producer replaying outcomes in order; records the clock at each attempt."""
    remaining = list(outcomes)
    attempts = []

    async def producer():
        attempts.append(clock.now())
        outcome = remaining.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return producer, attempts


async def test_first_attempt_success_never_sleeps():
    clock = ManualClock()
    producer, attempts = _scripted(clock, {"success": True})
    result = await RetryExecutor(clock).execute(producer, RetryPolicy())
    assert result == {"success": True}
    assert len(attempts) == 1
    assert clock.sleeps == []


async def test_success_on_third_attempt_after_1s_and_2s():
    clock = ManualClock()
    start = clock.now()
    producer, attempts = _scripted(
        clock, TransportError("down"), ParseError(), {"success": True},
    )
    result = await drive(clock, RetryExecutor(clock).execute(producer, RetryPolicy()))
    assert result == {"success": True}
    assert clock.sleeps == [1.0, 2.0]
    assert attempts == [start, start + 1.0, start + 3.0]


async def test_exhaustion_raises_aggregated_failure_after_three_attempts():
    clock = ManualClock()
    last = LogicalFailure("User not found")
    producer, attempts = _scripted(
        clock, TransportError("down"), TransportError("down"), last,
    )
    context = ErrorContext(operation="user.login")

    with pytest.raises(AggregatedRetryFailure) as exc_info:
        await drive(
            clock, RetryExecutor(clock).execute(producer, RetryPolicy(), context),
        )

    error = exc_info.value
    assert error.attempts == 3
    assert error.last_error is last
    assert error.context.operation == "user.login"
    assert error.__cause__ is last
    assert len(attempts) == 3
    # No wait after the final attempt
    assert clock.sleeps == [1.0, 2.0]


async def test_attempt_number_recorded_on_each_cause():
    clock = ManualClock()
    first, second = TransportError("a"), TransportError("b")
    producer, _ = _scripted(clock, first, second, {"success": True})
    await drive(clock, RetryExecutor(clock).execute(producer, RetryPolicy()))
    assert first.context.attempt == 1
    assert second.context.attempt == 2


async def test_single_attempt_policy_never_sleeps():
    clock = ManualClock()
    producer, attempts = _scripted(clock, TransportError("down"))
    with pytest.raises(AggregatedRetryFailure) as exc_info:
        await RetryExecutor(clock).execute(producer, RetryPolicy(max_attempts=1))
    assert exc_info.value.attempts == 1
    assert len(attempts) == 1
    assert clock.sleeps == []


async def test_logical_failure_fails_fast_when_policy_opts_out():
    clock = ManualClock()
    failure = LogicalFailure("Invalid plan")
    producer, attempts = _scripted(clock, failure)
    with pytest.raises(LogicalFailure) as exc_info:
        await RetryExecutor(clock).execute(
            producer, RetryPolicy(retry_logical_failures=False),
        )
    assert exc_info.value is failure
    assert len(attempts) == 1


async def test_non_client_errors_propagate_immediately():
    clock = ManualClock()
    producer, attempts = _scripted(clock, KeyError("bug"))
    with pytest.raises(KeyError):
        await RetryExecutor(clock).execute(producer, RetryPolicy())
    assert len(attempts) == 1


async def test_custom_base_delay_and_cap():
    clock = ManualClock()
    producer, _ = _scripted(
        clock, *[TransportError("down")] * 4, {"success": True},
    )
    policy = RetryPolicy(max_attempts=5, base_delay_ms=500, max_delay_ms=1500)
    await drive(clock, RetryExecutor(clock).execute(producer, policy))
    assert clock.sleeps == [0.5, 1.0, 1.5, 1.5]
