from dataclasses import dataclass

from src.app.core.services import (
    DbManageService,
    DeploymentOrchestrator,
    DeploymentService,
    DeploymentStore,
    RepositoryLocks,
)
from src.infra.shell_commands import ShellCommands


@dataclass
class ApplicationDependencies:
    database_service: DbManageService
    shell_commands: ShellCommands
    repository_locks: RepositoryLocks
    deployment_store: DeploymentStore
    orchestrator: DeploymentOrchestrator
    deployment_service: DeploymentService
