"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from loguru import logger
from starlette.responses import JSONResponse

from src.app.api.http.app_data import ApplicationDependencies
from src.app.api.http.routers import deploy, health
from src.app.api.http.schemas.deploy import DeployResponse
from src.app.core.errors import (
    DeploymentPipelineError,
    PersistenceFailure,
    ValidationRejection,
)
from src.app.core.services import (
    DbManageService,
    DeploymentOrchestrator,
    DeploymentService,
    RepositoryLocks,
    get_deployment_store,
)
from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.logging import configure_logging
from src.infra.shell_commands import ShellCommands


def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Wire the services one application instance shares across requests."""
    database = DbManageService(config.database.url, echo=config.database.echo)
    shell_commands = ShellCommands(
        helm_binary=config.helm.binary,
        timeout=config.helm.timeout_seconds,
    )
    locks = RepositoryLocks()
    orchestrator = DeploymentOrchestrator(
        shell_commands.helm,
        locks=locks,
        default_namespace=config.helm.default_namespace,
        token_policy=config.helm.token_policy,
        repository_max_length=config.helm.repository_max_length,
        install_max_length=config.helm.install_max_length,
    )
    store = get_deployment_store(database)
    return ApplicationDependencies(
        database_service=database,
        shell_commands=shell_commands,
        repository_locks=locks,
        deployment_store=store,
        orchestrator=orchestrator,
        deployment_service=DeploymentService(orchestrator, store),
    )


# =============================================================================
# Exception Handlers
# =============================================================================


async def _validation_rejection_handler(
    request: Request, exc: ValidationRejection
) -> JSONResponse:
    logger.info(f"Rejected input on {request.url.path}: {exc.details or exc.message}")
    return JSONResponse(
        status_code=400,
        content=DeployResponse(success=False, error=exc.message).to_content(),
    )


async def _pipeline_error_handler(
    request: Request, exc: DeploymentPipelineError
) -> JSONResponse:
    if isinstance(exc, PersistenceFailure):
        logger.error(f"Persistence failure on {request.url.path}: {exc.details}")
    else:
        logger.error(f"Pipeline failure on {request.url.path}: {exc.details or exc}")
    return JSONResponse(
        status_code=500,
        content=DeployResponse(success=False, error=exc.message).to_content(),
    )


async def _http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


# =============================================================================
# Factory
# =============================================================================


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Create the API application.

    Args:
        config: Application configuration (loaded from config.yaml if None)
        dependencies: Pre-built services; built from ``config`` at startup if None
    """
    if config is None:
        from src.app.runtime.context import get_config

        config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(config.logging)
        if app.state.app_dependencies is None:
            app.state.app_dependencies = build_dependencies(config)
        app_deps: ApplicationDependencies = app.state.app_dependencies
        app_deps.database_service.create_all()
        logger.info(
            f"{config.app.name} started in {config.app.environment} mode "
            f"(helm binary: {config.helm.binary})"
        )
        try:
            yield
        finally:
            app_deps.database_service.dispose()
            logger.info(f"{config.app.name} stopped")

    app = FastAPI(title=config.app.name, lifespan=lifespan)
    app.state.config = config
    app.state.app_dependencies = dependencies

    app.add_exception_handler(ValidationRejection, _validation_rejection_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DeploymentPipelineError, _pipeline_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]

    app.include_router(health.router)
    app.include_router(health.ping_router)
    app.include_router(deploy.router)
    return app
