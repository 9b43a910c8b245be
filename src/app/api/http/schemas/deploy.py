"""Deployment request/response schemas.

Field names on the wire are camelCase (``helmInstall``, ``securityReport``,
``createdAt``); the Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.app.core.security import Finding, SecurityReport
from src.app.entities.deployment.table import DeploymentRecord

# =============================================================================
# Request Models
# =============================================================================


class DeployRequest(BaseModel):
    """Request body for POST /api/deploy.

    Both fields are optional and untyped at the schema level so that a
    missing or non-string field is answered with the deploy error shape
    instead of a generic 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    repository: Any = Field(
        default=None,
        description="Repository alias and https URL, e.g. 'bitnami https://charts.bitnami.com/bitnami'",
    )
    helm_install: Any = Field(
        default=None,
        alias="helmInstall",
        description="Arguments after 'helm upgrade --install', e.g. 'web bitnami/nginx -n web'",
    )


# =============================================================================
# Response Models
# =============================================================================


class FindingSchema(BaseModel):
    name: str
    message: str
    description: str
    severity: str

    @classmethod
    def from_finding(cls, finding: Finding) -> FindingSchema:
        return cls(
            name=finding.name,
            message=finding.message,
            description=finding.description,
            severity=finding.severity.value,
        )


class SecurityReportSchema(BaseModel):
    """Advisory security findings for the submitted install values."""

    errors: list[FindingSchema] = Field(default_factory=list)
    warnings: list[FindingSchema] = Field(default_factory=list)
    summary: str = ""

    @classmethod
    def from_report(cls, report: SecurityReport) -> SecurityReportSchema:
        return cls(
            errors=[FindingSchema.from_finding(f) for f in report.errors],
            warnings=[FindingSchema.from_finding(f) for f in report.warnings],
            summary=report.summary,
        )


class DeployResponse(BaseModel):
    """Response body for POST /api/deploy, on success and on failure."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(description="Whether the Helm install succeeded")
    output: str = Field(default="", description="Step-by-step deployment transcript")
    error: str | None = Field(default=None, description="Generic error message")
    security_report: SecurityReportSchema | None = Field(
        default=None, alias="securityReport"
    )

    def to_content(self) -> dict[str, object]:
        """Serialize for a JSONResponse using wire names, omitting nulls."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DeploymentSummary(BaseModel):
    """One row of GET /api/deployments."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    type: str
    namespace: str
    status: str
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_record(cls, record: DeploymentRecord) -> DeploymentSummary:
        return cls(
            id=record.id or 0,
            name=record.name,
            type=record.type,
            namespace=record.namespace,
            status=record.status,
            created_at=record.created_at,
        )


class PingResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of 401 and other non-deploy error responses."""

    error: str
