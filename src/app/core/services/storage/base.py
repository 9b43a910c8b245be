"""Deployment record storage interface.

The deployment pipeline only needs to write one record per attempt and read
a user's history back; the storage schema is otherwise opaque to it.
"""

from abc import ABC, abstractmethod

from src.app.entities.deployment.table import DeploymentRecord


class DeploymentStore(ABC):
    """Abstract interface for deployment record backends."""

    @abstractmethod
    def save(
        self,
        *,
        user_id: str,
        name: str,
        namespace: str,
        transcript: str,
        status: str,
    ) -> DeploymentRecord:
        """Insert one deployment record.

        Args:
            user_id: Identity of the caller who requested the deployment
            name: Display name of the deployment
            namespace: Target Kubernetes namespace
            transcript: Aggregated step output
            status: Final status (e.g. "deployed", "failed")

        Returns:
            The stored record with its id populated

        Raises:
            PersistenceFailure: If the record cannot be written
        """
        pass

    @abstractmethod
    def list_for_user(self, user_id: str, limit: int = 50) -> list[DeploymentRecord]:
        """List a user's deployment records, newest first.

        Raises:
            PersistenceFailure: If the records cannot be read
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the storage backend is available."""
        pass
