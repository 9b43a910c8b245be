"""In-memory deployment record storage, used by tests and local CLI runs."""

from __future__ import annotations

import threading
from typing import override

from src.app.core.services.storage.base import DeploymentStore
from src.app.entities.deployment.table import DeploymentRecord


class InMemoryDeploymentStore(DeploymentStore):
    """Thread-safe in-memory store."""

    def __init__(self) -> None:
        self._records: list[DeploymentRecord] = []
        self._lock = threading.Lock()

    @override
    def save(
        self,
        *,
        user_id: str,
        name: str,
        namespace: str,
        transcript: str,
        status: str,
    ) -> DeploymentRecord:
        with self._lock:
            record = DeploymentRecord(
                id=len(self._records) + 1,
                user_id=user_id,
                name=name,
                namespace=namespace,
                transcript=transcript,
                status=status,
            )
            self._records.append(record)
            return record

    @override
    def list_for_user(self, user_id: str, limit: int = 50) -> list[DeploymentRecord]:
        with self._lock:
            matching = [r for r in self._records if r.user_id == user_id]
        return list(reversed(matching))[:limit]

    @override
    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True

    @property
    def records(self) -> list[DeploymentRecord]:
        """Snapshot of every stored record, oldest first."""
        with self._lock:
            return list(self._records)
