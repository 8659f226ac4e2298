"""Session Routes — login, register, logout, refresh, and the current-session query.

Invariants:
    - Login/register failures surface as structured ClientError responses
    - GET /session never mutates state; it reports status computed at call time
    - Logout is idempotent (always 200)
"""

from fastapi import APIRouter, Depends

from autopostr_client.api.dependencies import get_session_manager
from autopostr_client.schemas.session import (
    LoginRequest, RegisterRequest, SessionResponse,
)
from autopostr_client.services.session_manager import SessionManager

router = APIRouter(prefix="/api/v1/session", tags=["session"])


async def _view(manager: SessionManager) -> SessionResponse:
    return SessionResponse(
        status=manager.status,
        authenticated=await manager.is_authenticated(),
        session=manager.current_session,
    )


@router.get("", response_model=SessionResponse)
async def get_session(manager: SessionManager = Depends(get_session_manager)):
    """Current session state."""
    return await _view(manager)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest, manager: SessionManager = Depends(get_session_manager),
):
    await manager.login(body.email)
    return await _view(manager)


@router.post("/register", response_model=SessionResponse)
async def register(
    body: RegisterRequest, manager: SessionManager = Depends(get_session_manager),
):
    await manager.register(body.model_dump(exclude_none=True))
    return await _view(manager)


@router.post("/logout", response_model=SessionResponse)
async def logout(manager: SessionManager = Depends(get_session_manager)):
    await manager.logout()
    return await _view(manager)


@router.post("/refresh", response_model=SessionResponse)
async def refresh(manager: SessionManager = Depends(get_session_manager)):
    """Re-read the profile now (same as the periodic refresh)."""
    await manager.refresh()
    return await _view(manager)
