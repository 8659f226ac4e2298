"""Route Dependencies — resolve the ClientContext stored on the app.

Invariants:
    - Routes never construct services; they read app.state.context
"""

from fastapi import Request

from autopostr_client.bootstrap import ClientContext
from autopostr_client.services.api_client import ApiClient
from autopostr_client.services.session_manager import SessionManager


def get_context(request: Request) -> ClientContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Client context not initialized")
    return context


def get_session_manager(request: Request) -> SessionManager:
    return get_context(request).session_manager


def get_api_client(request: Request) -> ApiClient:
    return get_context(request).api_client
