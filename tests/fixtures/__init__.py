"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from src.app.core.services import (
    DeploymentOrchestrator,
    InMemoryDeploymentStore,
    RepositoryLocks,
)
from src.app.runtime.config.config_data import AuthConfig, ConfigData, DatabaseConfig
from src.infra.shell_commands import HelmCommands, ProcessResult

TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests-only"


class FakeRunner:
    """Records every invocation and answers with programmed results.

    Results are looked up by the first Helm argument(s): ``"repo add"``,
    ``"repo update"``, ``"repo remove"``, ``"upgrade"`` or ``"version"``.
    Unprogrammed commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self.results: dict[str, ProcessResult] = {}

    def program(self, key: str, result: ProcessResult) -> None:
        self.results[key] = result

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> ProcessResult:
        self.calls.append([command, *args])
        self.timeouts.append(timeout)
        key = " ".join(args[:2]) if args and args[0] == "repo" else (args[0] if args else "")
        return self.results.get(key, ProcessResult())

    @property
    def subcommands(self) -> list[str]:
        return [
            " ".join(call[1:3]) if call[1] == "repo" else call[1] for call in self.calls
        ]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def helm_commands(fake_runner: FakeRunner) -> HelmCommands:
    return HelmCommands(fake_runner, binary="helm", timeout=30)  # type: ignore[arg-type]


@pytest.fixture
def orchestrator(helm_commands: HelmCommands) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(helm_commands, locks=RepositoryLocks())


@pytest.fixture
def memory_store() -> InMemoryDeploymentStore:
    return InMemoryDeploymentStore()


@pytest.fixture
def test_config() -> ConfigData:
    return ConfigData(
        auth=AuthConfig(jwt_secret=TEST_JWT_SECRET),
        database=DatabaseConfig(url="sqlite://"),
    )


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build HS256 tokens signed with the test secret."""

    def _make(
        user_id: object = 42,
        username: str | None = "alice",
        *,
        secret: str = TEST_JWT_SECRET,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        claims: dict[str, object] = {"exp": datetime.now(UTC) + expires_in}
        if user_id is not None:
            claims["userId"] = user_id
        if username is not None:
            claims["username"] = username
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make
