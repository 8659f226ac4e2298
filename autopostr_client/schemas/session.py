"""Session Schemas — Pydantic models for the bridge API boundary.

Invariants:
    - LoginRequest.email / RegisterRequest.email: non-empty after stripping
    - RegisterRequest keeps any extra signup fields and forwards them to the backend
    - OperationRequest.ttl_ms only meaningful with cacheable=True

Design Decisions:
    - Field shape checks only: validating email syntax is the front end's job
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autopostr_client.core.domain_types import SessionStatus
from autopostr_client.core.session_model import Session


class LoginRequest(BaseModel):
    """Login by email (the backend owns the account lookup)."""
    email: str = Field(min_length=1, max_length=320)

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("email cannot be empty or whitespace")
        return v


class RegisterRequest(LoginRequest):
    """Signup payload — name, email, plus whatever the signup page collects."""
    model_config = ConfigDict(extra="allow")

    name: str | None = Field(None, max_length=200)


class OperationRequest(BaseModel):
    """Generic backend operation call."""
    payload: dict[str, Any] = Field(default_factory=dict)
    cacheable: bool = False
    ttl_ms: int | None = Field(None, gt=0)


class SessionResponse(BaseModel):
    """Current session view for front ends."""
    status: SessionStatus
    authenticated: bool
    session: Session | None = None
