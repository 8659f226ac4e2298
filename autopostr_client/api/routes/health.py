"""Health & Readiness Probes — liveness, storage readiness, backend reachability.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the KV store is unreachable
    - GET /health/backend never fails: it reports {online: false, error} instead
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from autopostr_client.api.dependencies import get_api_client, get_context
from autopostr_client.bootstrap import ClientContext
from autopostr_client.services.api_client import ApiClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "autopostr-client",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(context: ClientContext = Depends(get_context)):
    """Readiness probe — includes KV store connectivity."""
    if not await context.storage_ready():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "storage_unavailable",
            },
        )
    return {"status": "ready", "checks": {"storage": "healthy"}}


@router.get("/backend")
async def backend_status(client: ApiClient = Depends(get_api_client)):
    """Reachability of the backend endpoint."""
    return await client.status()
