"""Helm deployment endpoints.

Endpoint Summary:
    POST /api/deploy       - Validate and run a Helm deployment
    GET  /api/deployments  - List the caller's deployment records
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from loguru import logger
from starlette.responses import JSONResponse

from src.app.api.http.deps import CurrentUser, get_current_user, get_deployment_service
from src.app.api.http.schemas.deploy import (
    DeploymentSummary,
    DeployRequest,
    DeployResponse,
    ErrorResponse,
    SecurityReportSchema,
)
from src.app.core.services import DeploymentService

MISSING_FIELDS_MESSAGE = "Repository and Helm Install are required"

router = APIRouter(prefix="/api", tags=["deploy"])


@router.post(
    "/deploy",
    response_model=DeployResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Missing or rejected input", "model": DeployResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Helm install or persistence failed", "model": DeployResponse},
    },
    summary="Deploy a Helm chart",
    description="Add the repository, run 'helm upgrade --install' and record the attempt.",
)
async def deploy(
    request: DeployRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DeploymentService = Depends(get_deployment_service),
) -> DeployResponse | JSONResponse:
    """Deploy a chart for the authenticated caller.

    Security findings are advisory and returned in ``securityReport``; they
    never block the deployment. Validation rejections and persistence
    failures are turned into responses by the application's exception
    handlers.
    """
    if not request.repository or not request.helm_install:
        return JSONResponse(
            status_code=400,
            content=DeployResponse(
                success=False, error=MISSING_FIELDS_MESSAGE
            ).to_content(),
        )

    outcome = await service.deploy(user.user_id, request.repository, request.helm_install)

    response = DeployResponse(
        success=outcome.success,
        output=outcome.transcript,
        error=outcome.error,
        security_report=SecurityReportSchema.from_report(outcome.security_report),
    )
    if not outcome.success:
        logger.warning(f"Deployment for user {user.user_id} failed")
        return JSONResponse(status_code=500, content=response.to_content())

    return response


@router.get(
    "/deployments",
    response_model=list[DeploymentSummary],
    response_model_by_alias=True,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List deployments",
    description="Return the caller's deployment records, newest first.",
)
async def list_deployments(
    limit: int = Query(default=50, ge=1, le=500),
    user: CurrentUser = Depends(get_current_user),
    service: DeploymentService = Depends(get_deployment_service),
) -> list[DeploymentSummary]:
    records = await service.history(user.user_id, limit)
    return [DeploymentSummary.from_record(record) for record in records]
