"""Tests for the wire envelope — request body shape and response classification."""

import json

import pytest

from autopostr_client.core.envelope import (
    CallOptions, RequestEnvelope, build_wire_body, parse_response_body,
)
from autopostr_client.core.errors import LogicalFailure, ParseError


# ─── Request body ───────────────────────────────────────────────

def test_body_is_flat_payload_plus_operation():
    envelope = RequestEnvelope("user.login", {"email": "a@b.com"})
    assert json.loads(build_wire_body(envelope)) == {
        "email": "a@b.com", "operation": "user.login",
    }


def test_operation_field_name_configurable():
    envelope = RequestEnvelope("user.login", {"email": "a@b.com"})
    body = json.loads(build_wire_body(envelope, operation_field="action"))
    assert body["action"] == "user.login"
    assert "operation" not in body


def test_operation_field_wins_over_payload_field():
    envelope = RequestEnvelope("post.create", {"operation": "spoofed"})
    assert json.loads(build_wire_body(envelope))["operation"] == "post.create"


def test_with_payload_copies_envelope():
    original = RequestEnvelope("post.list", {"status": "draft"})
    updated = original.with_payload(email="a@b.com")
    assert original.payload == {"status": "draft"}
    assert updated.payload == {"status": "draft", "email": "a@b.com"}


# ─── Response classification ────────────────────────────────────

def test_success_body_returned():
    assert parse_response_body('{"success": true, "user": {"email": "a@b.com"}}') == {
        "success": True, "user": {"email": "a@b.com"},
    }


def test_invalid_json_is_parse_error():
    with pytest.raises(ParseError) as exc_info:
        parse_response_body("<html>oops</html>")
    assert exc_info.value.message == "Invalid JSON response from server"


def test_non_object_json_is_parse_error():
    with pytest.raises(ParseError):
        parse_response_body("[1, 2, 3]")


def test_success_false_is_logical_failure_with_backend_message():
    with pytest.raises(LogicalFailure) as exc_info:
        parse_response_body('{"success": false, "message": "User not found"}')
    assert exc_info.value.message == "User not found"
    assert exc_info.value.response["success"] is False


def test_missing_success_field_is_logical_failure():
    with pytest.raises(LogicalFailure) as exc_info:
        parse_response_body('{"user": {}}')
    assert exc_info.value.message == "Request failed"


# ─── Call options ───────────────────────────────────────────────

@pytest.mark.parametrize("ttl_ms", [0, -1])
def test_call_options_reject_non_positive_ttl(ttl_ms):
    with pytest.raises(ValueError):
        CallOptions(cacheable=True, ttl_ms=ttl_ms)


def test_call_options_ttl_defaults_to_none():
    assert CallOptions(cacheable=True).ttl_ms is None
