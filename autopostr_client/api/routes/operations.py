"""Operation Routes — perform a named backend operation on behalf of the front end.

Invariants:
    - Requires an authenticated session; otherwise the session is cleared and 401 returned
    - The response is the backend's success body, unchanged
"""

from typing import Any

from fastapi import APIRouter, Depends

from autopostr_client.api.dependencies import get_api_client, get_session_manager
from autopostr_client.core.envelope import CallOptions
from autopostr_client.core.errors import AuthenticationRequiredError, ErrorContext
from autopostr_client.schemas.session import OperationRequest
from autopostr_client.services.api_client import ApiClient
from autopostr_client.services.session_manager import SessionManager

router = APIRouter(prefix="/api/v1/operations", tags=["operations"])


@router.post("/{operation}")
async def perform_operation(
    operation: str,
    body: OperationRequest,
    client: ApiClient = Depends(get_api_client),
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    if not await manager.require_auth():
        raise AuthenticationRequiredError(ErrorContext(operation=operation))
    return await client.call(
        operation,
        body.payload,
        CallOptions(cacheable=body.cacheable, ttl_ms=body.ttl_ms),
    )
