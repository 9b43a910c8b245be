"""Request-level deployment service.

Runs the blocking orchestrator on the threadpool so a slow Helm invocation
does not stall the event loop, then persists the outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.concurrency import run_in_threadpool
from loguru import logger

if TYPE_CHECKING:
    from src.app.core.services.storage import DeploymentStore
    from src.app.entities.deployment.table import DeploymentRecord

    from .orchestrator import DeploymentOrchestrator, DeploymentOutcome


class DeploymentService:
    """Coordinates one user's deployment request with persistence.

    Validation rejections propagate before anything is executed or stored.
    Every attempt that passes validation is stored, including failed installs.

    Note:
        A client disconnect does not cancel an in-flight Helm process; the
        worker thread runs the pipeline to completion.
    """

    def __init__(
        self, orchestrator: DeploymentOrchestrator, store: DeploymentStore
    ) -> None:
        self._orchestrator = orchestrator
        self._store = store

    async def deploy(
        self, user_id: str, repository: str, helm_install: str
    ) -> DeploymentOutcome:
        """Validate, run and record a deployment.

        Raises:
            ValidationRejection: If the inputs are rejected
            PersistenceFailure: If the record cannot be stored
        """
        outcome = await run_in_threadpool(
            self._orchestrator.deploy, repository, helm_install
        )
        logger.info(
            f"Deployment for user {user_id} finished with status {outcome.status.value}"
        )

        await run_in_threadpool(
            lambda: self._store.save(
                user_id=user_id,
                name=f"helm-{outcome.release}" if outcome.release else "helm-deployment",
                namespace=outcome.namespace,
                transcript=outcome.transcript,
                status=outcome.status.value,
            )
        )
        return outcome

    async def history(self, user_id: str, limit: int = 50) -> list[DeploymentRecord]:
        """Return the caller's deployment records, newest first."""
        return await run_in_threadpool(self._store.list_for_user, user_id, limit)
