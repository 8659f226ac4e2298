"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Durations are integer milliseconds (DurationMs); epoch timestamps are EpochMs
    - RequestKey is only produced by core.request_key.compute_request_key
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to KV-store keys without custom encoders
    - StorageKey values match the entry names the browser client persisted,
      so sessions written by either client are readable by the other
"""

from enum import Enum
from typing import NewType


# ─── Value Types ─────────────────────────────────────────────────

RequestKey = NewType("RequestKey", str)
DurationMs = NewType("DurationMs", int)
EpochMs = NewType("EpochMs", int)


# ─── Enums ───────────────────────────────────────────────────────

class SessionStatus(str, Enum):
    """Session lifecycle states. EXPIRED is transient (collapses on next check)."""
    ANONYMOUS = "anonymous"
    ACTIVE = "active"
    EXPIRED = "expired"


class StorageKey(str, Enum):
    """The three persisted session entries — written and cleared together."""
    USER_EMAIL = "userEmail"
    USER_DATA = "userData"
    SESSION_EXPIRY = "sessionExpiry"


class Operation(str, Enum):
    """Backend operation names understood by the endpoint."""
    USER_REGISTER = "user.register"
    USER_LOGIN = "user.login"
    USER_PROFILE = "user.profile"
    TOKEN_SAVE = "token.save"
    TOKEN_LIST = "token.list"
    POST_CREATE = "post.create"
    POST_LIST = "post.list"
    POST_STATS = "post.stats"


class NoticeLevel(str, Enum):
    """Severity of a user-facing notice handed to a Notifier."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
