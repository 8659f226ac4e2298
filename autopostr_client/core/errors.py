"""Error Hierarchy — typed, categorized exceptions for every client failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries a human-readable message (never empty)
    - AggregatedRetryFailure always wraps the last underlying cause and the attempt count
    - to_response() produces the REST envelope used by the local bridge

Design Decisions:
    - Single hierarchy with ClientError base: callers catch one type, the bridge
      maps it to JSON with one handler
    - ErrorContext as dataclass: rich observability without coupling to logging
    - user_message lives on the context so error middleware can attach a
      friendly text without replacing the exception
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and classification."""
    TRANSPORT = "transport"
    PARSE = "parse"
    BACKEND = "backend"
    RETRY_EXHAUSTED = "retry_exhausted"
    STORAGE = "storage"
    AUTHENTICATION = "authentication"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    request_key: str | None = None
    attempt: int | None = None
    identity: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        message = message or "Request failed"
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "detail": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "attempt": self.context.attempt,
                },
            }
        }


# ─── Request Failures (retryable) ───────────────────────────────

class TransportError(ClientError):
    """Network unreachable or non-2xx status from the endpoint."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "TRANSPORT_ERROR", ErrorCategory.TRANSPORT,
            ErrorSeverity.ERROR, context, 502,
        )
        self.status_code = status_code


class ParseError(ClientError):
    """Response body is not a JSON object."""
    def __init__(
        self,
        message: str = "Invalid JSON response from server",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "PARSE_ERROR", ErrorCategory.PARSE,
            ErrorSeverity.ERROR, context, 502,
        )


class LogicalFailure(ClientError):
    """Backend answered with success: false."""
    def __init__(
        self,
        message: str,
        response: dict | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "LOGICAL_FAILURE", ErrorCategory.BACKEND,
            ErrorSeverity.WARNING, context, 400,
        )
        self.response = response or {}


class AggregatedRetryFailure(ClientError):
    """Every attempt of the retry budget failed."""
    def __init__(
        self,
        attempts: int,
        last_error: ClientError,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.attempt = attempts
        super().__init__(
            f"API request failed after {attempts} attempts: {last_error.message}",
            "RETRY_EXHAUSTED", ErrorCategory.RETRY_EXHAUSTED,
            ErrorSeverity.CRITICAL, ctx, last_error.http_status,
        )
        self.attempts = attempts
        self.last_error = last_error


# ─── Local Failures ─────────────────────────────────────────────

class StorageError(ClientError):
    """Key-value store operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AuthenticationRequiredError(ClientError):
    """Operation needs an active session and none exists."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required. Please login again.",
            "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
