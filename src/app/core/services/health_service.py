"""Health check service for application dependencies.

The service checks the two things a deployment needs besides the request
itself: the deployment record database and a runnable Helm binary. It is
kept out of the HTTP layer so the CLI can reuse it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from src.app.api.http.schemas.health import (
    AllServicesHealth,
    DatabaseHealth,
    HelmHealth,
    OverallStatus,
    ReadinessResponse,
    ServiceStatus,
)
from src.app.core.errors import UpstreamProcessFailure

if TYPE_CHECKING:
    from src.app.api.http.app_data import ApplicationDependencies
    from src.app.runtime.config.config_data import ConfigData


class HealthCheckService:
    """Service for performing readiness checks on application dependencies.

    Example:
        ```python
        health_service = HealthCheckService(app_deps, config)
        result = await health_service.check_all()
        if result.status == OverallStatus.READY:
            print("Ready to deploy")
        ```
    """

    def __init__(
        self,
        app_deps: ApplicationDependencies,
        config: ConfigData,
    ) -> None:
        self._app_deps = app_deps
        self._config = config

    # =========================================================================
    # Public API
    # =========================================================================

    async def check_all(self) -> ReadinessResponse:
        """Check every dependency; both are critical."""
        database = await self.check_database()
        helm = await self.check_helm()

        ready = (
            database.status == ServiceStatus.HEALTHY
            and helm.status == ServiceStatus.HEALTHY
        )
        return ReadinessResponse(
            status=OverallStatus.READY if ready else OverallStatus.NOT_READY,
            environment=self._config.app.environment,
            checks=AllServicesHealth(database=database, helm=helm),
        )

    async def check_database(self) -> DatabaseHealth:
        db_type = self._config.database.url.split(":", 1)[0].split("+", 1)[0]
        healthy = await run_in_threadpool(self._app_deps.database_service.health_check)
        return DatabaseHealth(
            status=ServiceStatus.HEALTHY if healthy else ServiceStatus.UNHEALTHY,
            type=db_type,
            error=None if healthy else "Database is not reachable",
        )

    async def check_helm(self) -> HelmHealth:
        """Run ``helm version --short`` with the configured binary."""
        helm = self._app_deps.shell_commands.helm
        try:
            version = await run_in_threadpool(helm.version)
        except UpstreamProcessFailure as e:
            logger.warning(f"Helm health check failed: {e.details or e.message}")
            return HelmHealth(
                status=ServiceStatus.UNHEALTHY,
                binary=helm.binary,
                error=e.message,
            )
        return HelmHealth(status=ServiceStatus.HEALTHY, binary=helm.binary, version=version)
