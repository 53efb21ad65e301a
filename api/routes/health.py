"""Health check route.

GET /healthz - Liveness check, no authentication.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from api.models.api_models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Basic liveness check.

    Returns 200 while the process is serving requests. Does not touch the
    record store or the completion backend.
    """
    return HealthResponse(ts=datetime.now(timezone.utc))
