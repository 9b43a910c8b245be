"""Factory for obtaining the appropriate deployment storage backend."""

from typing import TYPE_CHECKING, Optional

from src.app.core.services.storage.base import DeploymentStore
from src.app.core.services.storage.memory import InMemoryDeploymentStore

if TYPE_CHECKING:
    from src.app.core.services.database.db_manage import DbManageService


def get_deployment_store(database: Optional["DbManageService"]) -> DeploymentStore:
    """Get the configured deployment store instance."""

    if database is not None:
        from src.app.core.services.storage.sql import SqlDeploymentStore

        return SqlDeploymentStore(database.engine)

    return InMemoryDeploymentStore()
