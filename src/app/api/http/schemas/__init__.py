"""API schema definitions for HTTP endpoints.

Modules:
    deploy: Deployment request, response and history models
    health: Health check response models
"""

from src.app.api.http.schemas.deploy import (
    DeploymentSummary,
    DeployRequest,
    DeployResponse,
    ErrorResponse,
    FindingSchema,
    PingResponse,
    SecurityReportSchema,
)
from src.app.api.http.schemas.health import (
    AllServicesHealth,
    DatabaseHealth,
    HelmHealth,
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
    ServiceHealthBase,
    ServiceStatus,
)

__all__ = [
    # Deploy schemas
    "DeployRequest",
    "DeployResponse",
    "DeploymentSummary",
    "ErrorResponse",
    "FindingSchema",
    "PingResponse",
    "SecurityReportSchema",
    # Health schemas
    "ServiceStatus",
    "OverallStatus",
    "ServiceHealthBase",
    "DatabaseHealth",
    "HelmHealth",
    "AllServicesHealth",
    "ReadinessResponse",
    "LivenessResponse",
]
