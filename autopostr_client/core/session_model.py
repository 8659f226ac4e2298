"""Session Model — the locally held record asserting a user is authenticated.

Invariants:
    - expires_at_ms is set only by new_session() (login/register): now + timeout
    - with_identity() (refresh) replaces the user record, never the expiry
    - A session is expired iff now_ms > expires_at_ms
    - Persisted form is exactly three string entries (StorageKey); any missing
      or unreadable entry means "no session"

Design Decisions:
    - UserIdentity keeps unknown backend fields (extra="allow"): the backend
      owns the user record shape, the client only requires email
    - Pure functions take now_ms as an argument: no clock access in core
"""

import json
import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from autopostr_client.core.domain_types import EpochMs, StorageKey

logger = logging.getLogger(__name__)

DEFAULT_PLAN = "free"


class UserIdentity(BaseModel):
    """Backend user record. Only email is required."""

    model_config = ConfigDict(extra="allow")

    email: str
    name: str | None = None


class Session(BaseModel):
    """Authenticated session: who, on which plan, until when."""

    model_config = ConfigDict(frozen=True)

    identity: UserIdentity
    plan: str = DEFAULT_PLAN
    expires_at_ms: int

    @property
    def email(self) -> str:
        return self.identity.email

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at_ms

    def with_identity(self, user: dict) -> "Session":
        """Refreshed session: new user record, same expiry."""
        identity = UserIdentity.model_validate(user)
        return Session(
            identity=identity,
            plan=_plan_of(user, self.plan),
            expires_at_ms=self.expires_at_ms,
        )


def _plan_of(user: dict, default: str = DEFAULT_PLAN) -> str:
    plan = user.get("plan")
    return str(plan) if plan else default


def new_session(user: dict, now_ms: int, timeout_ms: int) -> Session:
    """Session for a freshly authenticated user record."""
    return Session(
        identity=UserIdentity.model_validate(user),
        plan=_plan_of(user),
        expires_at_ms=EpochMs(now_ms + timeout_ms),
    )


def session_to_entries(session: Session) -> dict[StorageKey, str]:
    """Persisted form. Insertion order puts the expiry last."""
    return {
        StorageKey.USER_EMAIL: session.email,
        StorageKey.USER_DATA: session.model_dump_json(),
        StorageKey.SESSION_EXPIRY: str(session.expires_at_ms),
    }


def session_from_entries(entries: dict[StorageKey, str | None]) -> Session | None:
    """Rebuild a session from persisted entries; None on partial or corrupt data."""
    email = entries.get(StorageKey.USER_EMAIL)
    blob = entries.get(StorageKey.USER_DATA)
    expiry = entries.get(StorageKey.SESSION_EXPIRY)
    if not (email and blob and expiry):
        return None
    try:
        expires_at_ms = int(expiry)
        data = json.loads(blob)
        if "identity" not in data:
            # Bare user record (as written by the browser client)
            return Session(
                identity=UserIdentity.model_validate(data),
                plan=_plan_of(data),
                expires_at_ms=expires_at_ms,
            )
        return Session.model_validate({**data, "expires_at_ms": expires_at_ms})
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Discarding unreadable persisted session: {e}")
        return None
