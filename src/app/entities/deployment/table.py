"""Database table for deployment records."""

from datetime import UTC, datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DeploymentRecord(SQLModel, table=True):
    """One deployment attempt and its aggregated transcript."""

    __tablename__ = "deployments"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, max_length=255)
    name: str = Field(max_length=255)
    type: str = Field(default="helm", max_length=50)
    namespace: str = Field(max_length=255)
    transcript: str = Field(sa_column=Column(Text, nullable=False))
    status: str = Field(default="pending", max_length=50)
    created_at: datetime = Field(default_factory=_utcnow)
