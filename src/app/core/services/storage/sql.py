"""SQLModel-backed deployment record storage."""

from __future__ import annotations

from typing import override

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from src.app.core.errors import PersistenceFailure
from src.app.core.services.storage.base import DeploymentStore
from src.app.entities.deployment.table import DeploymentRecord

RECORD_FAILED_MESSAGE = "Failed to record deployment"
READ_FAILED_MESSAGE = "Failed to load deployments"


class SqlDeploymentStore(DeploymentStore):
    """Stores deployment records in the ``deployments`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

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
        record = DeploymentRecord(
            user_id=user_id,
            name=name,
            namespace=namespace,
            transcript=transcript,
            status=status,
        )
        try:
            with Session(self._engine) as session:
                session.add(record)
                session.commit()
                session.refresh(record)
                session.expunge(record)
        except SQLAlchemyError as e:
            logger.exception("Failed to insert deployment record")
            raise PersistenceFailure(RECORD_FAILED_MESSAGE, details=str(e)) from e

        logger.debug(f"Stored deployment record {record.id} for user {user_id}")
        return record

    @override
    def list_for_user(self, user_id: str, limit: int = 50) -> list[DeploymentRecord]:
        statement = (
            select(DeploymentRecord)
            .where(DeploymentRecord.user_id == user_id)
            .order_by(col(DeploymentRecord.created_at).desc(), col(DeploymentRecord.id).desc())
            .limit(limit)
        )
        try:
            with Session(self._engine) as session:
                records = list(session.exec(statement).all())
                for record in records:
                    session.expunge(record)
                return records
        except SQLAlchemyError as e:
            logger.exception("Failed to list deployment records")
            raise PersistenceFailure(READ_FAILED_MESSAGE, details=str(e)) from e

    @override
    def is_available(self) -> bool:
        try:
            with Session(self._engine) as session:
                session.exec(select(DeploymentRecord.id).limit(1)).first()
            return True
        except SQLAlchemyError:
            return False
