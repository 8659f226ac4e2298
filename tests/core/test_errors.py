"""Tests for the error hierarchy — codes, statuses, and the REST error envelope."""

from autopostr_client.core.errors import (
    AggregatedRetryFailure, AuthenticationRequiredError, ClientError,
    ErrorCategory, ErrorContext, ErrorSeverity, LogicalFailure, ParseError,
    StorageError, TransportError,
)


def test_every_error_is_a_client_error():
    for error in (
        TransportError("down"), ParseError(), LogicalFailure("no"),
        StorageError("locked", "commit"), AuthenticationRequiredError(),
    ):
        assert isinstance(error, ClientError)
        assert error.message


def test_transport_error_keeps_status_code():
    error = TransportError("HTTP 503: Service Unavailable", status_code=503)
    assert error.status_code == 503
    assert error.category == ErrorCategory.TRANSPORT
    assert error.http_status == 502


def test_empty_message_gets_default():
    assert LogicalFailure("").message == "Request failed"


def test_aggregated_failure_wraps_last_error():
    last = LogicalFailure("User not found")
    error = AggregatedRetryFailure(3, last)
    assert error.attempts == 3
    assert error.last_error is last
    assert error.message == "API request failed after 3 attempts: User not found"
    assert error.http_status == 400
    assert error.severity == ErrorSeverity.CRITICAL
    assert error.context.attempt == 3


def test_storage_error_message_names_operation():
    error = StorageError("disk full", "commit")
    assert error.message == "Storage commit failed: disk full"
    assert error.http_status == 503


def test_to_response_prefers_user_message():
    error = TransportError(
        "Failed to fetch: refused",
        context=ErrorContext(operation="user.login", user_message="Network error"),
    )
    body = error.to_response()["error"]
    assert body["code"] == "TRANSPORT_ERROR"
    assert body["message"] == "Network error"
    assert body["detail"] == "Failed to fetch: refused"
    assert body["category"] == "transport"
    assert body["context"]["operation"] == "user.login"


def test_to_response_falls_back_to_message():
    body = AuthenticationRequiredError().to_response()["error"]
    assert body["message"] == "Authentication required. Please login again."
    assert body["severity"] == "warning"
