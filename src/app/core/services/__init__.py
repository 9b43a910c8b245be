"""Core services exports."""

# Database Service
from .database.db_manage import DbManageService

# Deployment Services
from .deployment import (
    DeploymentOrchestrator,
    DeploymentOutcome,
    DeploymentService,
    DeploymentStatus,
    RepositoryLocks,
)

# Health Service
from .health_service import HealthCheckService

# Deployment record storage
from .storage import (
    DeploymentStore,
    InMemoryDeploymentStore,
    SqlDeploymentStore,
    get_deployment_store,
)

__all__ = [
    # Database Service
    "DbManageService",
    # Deployment Services
    "DeploymentOrchestrator",
    "DeploymentOutcome",
    "DeploymentService",
    "DeploymentStatus",
    "RepositoryLocks",
    # Health Service
    "HealthCheckService",
    # Storage
    "DeploymentStore",
    "InMemoryDeploymentStore",
    "SqlDeploymentStore",
    "get_deployment_store",
]
