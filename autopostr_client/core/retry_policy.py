"""Retry Policy — immutable per-call retry budget and backoff schedule.

Invariants:
    - max_attempts >= 1; base_delay_ms >= 0
    - delay_for(n) = base_delay_ms * 2**(n-1), capped by max_delay_ms when set
    - jitter == 0.0 gives exact delays (default, matches the backend contract)

Design Decisions:
    - Frozen pydantic model: validated on construction, safe to share between calls
    - retry_logical_failures defaults to True: success:false responses are
      retried like transport failures; set False to fail fast on them
"""

import random

from pydantic import BaseModel, ConfigDict, Field

from autopostr_client.core.errors import ClientError, LogicalFailure


class RetryPolicy(BaseModel):
    """Attempt budget and exponential backoff for one ApiClient call."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(3, ge=1)
    base_delay_ms: int = Field(1000, ge=0)
    max_delay_ms: int | None = Field(None, ge=0)
    jitter: float = Field(0.0, ge=0.0, le=1.0)
    retry_logical_failures: bool = True

    def delay_for(self, attempt: int) -> float:
        """Backoff in milliseconds after the given (1-based) failed attempt."""
        delay = self.base_delay_ms * (2 ** (attempt - 1))
        if self.max_delay_ms is not None:
            delay = min(delay, self.max_delay_ms)
        if self.jitter:
            delay = delay * random.uniform(1 - self.jitter, 1 + self.jitter)  # nosec B311
        return float(delay)

    def should_retry(self, error: ClientError) -> bool:
        if isinstance(error, LogicalFailure):
            return self.retry_logical_failures
        return True
