"""Unit tests for the readiness health check service."""

from unittest.mock import MagicMock

import pytest

from src.app.api.http.schemas.health import OverallStatus, ServiceStatus
from src.app.core.errors import UpstreamProcessFailure
from src.app.core.services.health_service import HealthCheckService


@pytest.fixture
def app_deps() -> MagicMock:
    deps = MagicMock()
    deps.database_service.health_check.return_value = True
    deps.shell_commands.helm.binary = "helm"
    deps.shell_commands.helm.version.return_value = "v3.14.0"
    return deps


class TestHealthCheckService:
    @pytest.mark.asyncio
    async def test_all_healthy(self, app_deps: MagicMock, test_config):
        result = await HealthCheckService(app_deps, test_config).check_all()

        assert result.status == OverallStatus.READY
        assert result.checks.database.type == "sqlite"
        assert result.checks.helm.version == "v3.14.0"

    @pytest.mark.asyncio
    async def test_database_down(self, app_deps: MagicMock, test_config):
        app_deps.database_service.health_check.return_value = False

        result = await HealthCheckService(app_deps, test_config).check_all()

        assert result.status == OverallStatus.NOT_READY
        assert result.checks.database.status == ServiceStatus.UNHEALTHY

    @pytest.mark.asyncio
    async def test_helm_missing(self, app_deps: MagicMock, test_config):
        app_deps.shell_commands.helm.version.side_effect = UpstreamProcessFailure(
            "helm version failed", details="executable not found"
        )

        health = await HealthCheckService(app_deps, test_config).check_helm()

        assert health.status == ServiceStatus.UNHEALTHY
        assert health.error == "helm version failed"
