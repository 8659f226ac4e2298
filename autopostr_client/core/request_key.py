"""Request Key — deterministic identity of an (operation, payload) pair.

Invariants:
    - Payload key order never affects the key (sort_keys at every depth)
    - Same operation + equal payload → same key, across processes
    - Operation name is the key prefix, so keys can be scoped by operation

Design Decisions:
    - Compact JSON over hashing: keys stay human-readable in logs and the
      identity substring stays searchable for per-user invalidation
"""

import json
from collections.abc import Mapping
from typing import Any

from autopostr_client.core.domain_types import RequestKey


def canonical_json(value: Any) -> str:
    """Stable JSON serialization (sorted keys, no whitespace)."""
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"),
        ensure_ascii=False, default=str,
    )


def compute_request_key(operation: str, payload: Mapping[str, Any]) -> RequestKey:
    return RequestKey(f"{operation}_{canonical_json(dict(payload))}")


def key_mentions(key: str, value: str) -> bool:
    """True if the JSON-encoded value appears in the key (per-user scoping)."""
    return canonical_json(value) in key
