"""Health check endpoints router for monitoring service availability.

Endpoint Summary:
    GET /health         - Liveness probe (app is running)
    GET /health/ready   - Readiness probe (database and Helm binary usable)
    GET /api/ping       - Configurable ping message
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse

from src.app.api.http.app_data import ApplicationDependencies
from src.app.api.http.deps import get_config
from src.app.api.http.schemas.deploy import PingResponse
from src.app.api.http.schemas.health import (
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
)
from src.app.core.services.health_service import HealthCheckService
from src.app.runtime.config.config_data import ConfigData

router = APIRouter(prefix="/health", tags=["health"])
ping_router = APIRouter(prefix="/api", tags=["health"])


# =============================================================================
# Dependencies
# =============================================================================


def get_health_service(
    request: Request, config: ConfigData = Depends(get_config)
) -> HealthCheckService:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return HealthCheckService(app_deps, config)


# =============================================================================
# Liveness Probe
# =============================================================================


@router.get(
    "",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Basic health check - returns 200 if the application process is running.",
)
async def health() -> LivenessResponse:
    """Liveness probe; does not check dependencies."""
    return LivenessResponse()


# =============================================================================
# Readiness Probe
# =============================================================================


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Database and Helm are ready"},
        503: {
            "description": "A dependency is not ready",
            "model": ReadinessResponse,
        },
    },
    summary="Readiness probe",
    description="Checks database connectivity and that the Helm binary runs.",
)
async def readiness(
    health_service: HealthCheckService = Depends(get_health_service),
) -> ReadinessResponse | JSONResponse:
    """Returns 200 if all dependencies are ready, 503 otherwise."""
    result = await health_service.check_all()

    if result.status == OverallStatus.NOT_READY:
        return JSONResponse(
            status_code=503,
            content=result.model_dump(mode="json"),
        )

    return result


# =============================================================================
# Ping
# =============================================================================


@ping_router.get("/ping", response_model=PingResponse, summary="Ping")
async def ping(config: ConfigData = Depends(get_config)) -> PingResponse:
    return PingResponse(message=config.app.ping_message)
