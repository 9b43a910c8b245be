"""Typed application configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    name: str = Field(default="kube-composer")
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)
    ping_message: str = Field(default="ping")


class HelmConfig(BaseModel):
    """Settings for the Helm CLI invocations and input validation."""

    binary: str = Field(default="helm", description="Helm executable name or path")
    timeout_seconds: float | None = Field(
        default=600,
        gt=0,
        description="Timeout for each Helm invocation (null disables it)",
    )
    token_policy: Literal["denylist", "allowlist"] = Field(
        default="denylist",
        description="'denylist' rejects shell metacharacters only; "
        "'allowlist' also enforces a per-token grammar",
    )
    default_namespace: str = Field(default="default")
    repository_max_length: int = Field(default=500, gt=0)
    install_max_length: int = Field(default=1000, gt=0)


class DatabaseConfig(BaseModel):
    url: str = Field(default="sqlite:///./kube_composer.db")
    echo: bool = Field(default=False)


class AuthConfig(BaseModel):
    jwt_secret: str = Field(min_length=1)
    jwt_algorithm: str = Field(default="HS256")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    serialize: bool = Field(default=False, description="Emit JSON log lines")


class ConfigData(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    helm: HelmConfig = Field(default_factory=HelmConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
