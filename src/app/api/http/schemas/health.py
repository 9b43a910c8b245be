"""Health check response schemas.

Status Terminology:
    - healthy: Dependency is fully operational
    - unhealthy: Dependency is not operational
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ServiceStatus(str, Enum):
    """Status values for individual dependency checks."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class OverallStatus(str, Enum):
    """Overall application readiness status.

    - READY: The database and the Helm binary are both usable
    - NOT_READY: At least one of them is not
    """

    READY = "ready"
    NOT_READY = "not_ready"


# =============================================================================
# Dependency Health Models
# =============================================================================


class ServiceHealthBase(BaseModel):
    """Base model for individual dependency health check results."""

    model_config = ConfigDict(use_enum_values=True)

    status: ServiceStatus = Field(description="Current health status")
    error: str | None = Field(
        default=None,
        description="Error message if status is unhealthy",
    )


class DatabaseHealth(ServiceHealthBase):
    """Health check result for the deployment record database."""

    type: Annotated[
        str,
        Field(description="Database backend (sqlite, postgresql, ...)"),
    ]


class HelmHealth(ServiceHealthBase):
    """Health check result for the Helm binary."""

    binary: str = Field(description="Configured Helm executable")
    version: str | None = Field(
        default=None,
        description="Output of 'helm version --short'",
    )


class AllServicesHealth(BaseModel):
    database: DatabaseHealth
    helm: HelmHealth


# =============================================================================
# Probe Responses
# =============================================================================


class ReadinessResponse(BaseModel):
    """Response model for the /health/ready endpoint."""

    model_config = ConfigDict(use_enum_values=True)

    status: OverallStatus = Field(description="Overall application readiness status")
    environment: str = Field(description="Current deployment environment")
    checks: AllServicesHealth = Field(description="Individual dependency results")


class LivenessResponse(BaseModel):
    """Response model for the /health endpoint (liveness probe).

    Only verifies the application process is running.
    """

    status: Annotated[
        str,
        Field(description="Always 'healthy' if the app is running"),
    ] = "healthy"
    service: Annotated[
        str,
        Field(description="Service identifier"),
    ] = "api"
