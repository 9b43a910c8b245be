"""Deployment record storage backends."""

from .base import DeploymentStore
from .factory import get_deployment_store
from .memory import InMemoryDeploymentStore
from .sql import SqlDeploymentStore

__all__ = [
    "DeploymentStore",
    "get_deployment_store",
    "InMemoryDeploymentStore",
    "SqlDeploymentStore",
]
