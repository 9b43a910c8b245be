"""Helm deployment pipeline services."""

from .locks import RepositoryLocks
from .orchestrator import (
    DEPLOYMENT_FAILED_MESSAGE,
    DeploymentOrchestrator,
    DeploymentOutcome,
    DeploymentPlan,
    DeploymentStatus,
)
from .service import DeploymentService

__all__ = [
    "DEPLOYMENT_FAILED_MESSAGE",
    "DeploymentOrchestrator",
    "DeploymentOutcome",
    "DeploymentPlan",
    "DeploymentService",
    "DeploymentStatus",
    "RepositoryLocks",
]
