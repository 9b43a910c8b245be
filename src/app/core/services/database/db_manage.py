"""Database engine management used across the application."""

from __future__ import annotations

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from src.app.entities.deployment.table import DeploymentRecord


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the configured database URL.

    SQLite engines are made usable from the request threadpool; in-memory
    SQLite shares one connection so every session sees the same tables.
    """
    if url.startswith("sqlite"):
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


class DbManageService:
    def __init__(self, url: str, *, echo: bool = False) -> None:
        self._engine = build_engine(url, echo=echo)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_all(self) -> None:
        """Create the deployments table if it does not exist."""
        from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

        try:
            SQLModel.metadata.create_all(
                self._engine, tables=[DeploymentRecord.__table__]  # type: ignore[list-item]
            )
            logger.info(f"Database initialized with table '{DeploymentRecord.__tablename__}'")
        except (ProgrammingError, IntegrityError, OperationalError) as e:
            # Multiple workers may race to create the same tables
            error_msg = str(e).lower()
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.debug(
                    f"Tables already exist or partially created, skipping: {type(e).__name__}"
                )
            else:
                raise

    def health_check(self) -> bool:
        """Run a trivial query to confirm the database is reachable."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    def dispose(self) -> None:
        self._engine.dispose()
