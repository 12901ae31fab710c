"""
Health check and monitoring router.

Provides liveness and readiness probes.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import settings
from ..dependencies import get_employee_service
from ..services.employee_service import EmployeeService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = settings.SERVICE_NAME
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    details: dict
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    Used by load balancers and orchestrators for liveness probes.
    """
    return HealthResponse(status="healthy", timestamp=_now())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Not ready", "model": ReadinessResponse}},
    summary="Readiness check",
    description="Check if service is ready to accept traffic (dependencies available)",
)
async def readiness_check(service: EmployeeService = Depends(get_employee_service)):
    """
    Readiness check.

    Checks:
    - MongoDB responds to ping
    - Redis responds to ping, when configured

    Returns 200 if ready, 503 if not ready.
    """
    checks = {
        "mongodb": "healthy" if await service.repository.ping() else "unhealthy",
    }

    redis_cache = service.cache.redis_cache
    if redis_cache is not None:
        checks["redis"] = "healthy" if await redis_cache.ping() else "unhealthy"
    else:
        checks["redis"] = "disabled"

    ready = all(check != "unhealthy" for check in checks.values())
    if not ready:
        logger.warning("Service not ready", checks=checks)

    response = ReadinessResponse(
        ready=ready,
        checks=checks,
        details=service.get_health_status(),
        timestamp=_now(),
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(),
    )
