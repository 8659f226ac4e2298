"""Envelope — wire format of every backend exchange.

Invariants:
    - Request body is a flat JSON object: payload fields plus the operation field
    - The operation field always wins over a same-named payload field
    - A response is a success only if it is a JSON object with success == true
    - Non-JSON or non-object body → ParseError; success false → LogicalFailure

Design Decisions:
    - Envelope is a dataclass, copied (never mutated) by middleware via with_payload()
    - Operation field name is a parameter: the endpoint historically read
      "action"; this client defaults to "operation"
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from autopostr_client.core.errors import LogicalFailure, ParseError
from autopostr_client.core.retry_policy import RetryPolicy

DEFAULT_OPERATION_FIELD = "operation"


@dataclass(frozen=True)
class RequestEnvelope:
    """One logical backend call: operation name, payload, injected identity."""
    operation: str
    payload: dict[str, Any] = field(default_factory=dict)
    auth_identity: str | None = None

    def with_payload(self, **fields: Any) -> "RequestEnvelope":
        return replace(self, payload={**self.payload, **fields})


@dataclass(frozen=True)
class CallOptions:
    """Per-call options recognised by ApiClient.call."""
    cacheable: bool = False
    ttl_ms: int | None = None
    retry_policy: RetryPolicy | None = None

    def __post_init__(self) -> None:
        if self.ttl_ms is not None and self.ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be positive, got {self.ttl_ms}")


def build_wire_body(
    envelope: RequestEnvelope, operation_field: str = DEFAULT_OPERATION_FIELD,
) -> str:
    """Serialize the envelope as the POST body sent to the endpoint."""
    body = {**envelope.payload, operation_field: envelope.operation}
    return json.dumps(body, ensure_ascii=False, default=str)


def parse_response_body(text: str) -> dict[str, Any]:
    """Parse and classify a response body. Returns the body on success."""
    try:
        body = json.loads(text)
    except (TypeError, ValueError):
        raise ParseError()
    if not isinstance(body, Mapping):
        raise ParseError("Invalid JSON response from server: expected an object")
    if not body.get("success"):
        raise LogicalFailure(body.get("message") or "Request failed", dict(body))
    return dict(body)
