"""FastAPI dependencies for the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from src.app.api.http.app_data import ApplicationDependencies
from src.app.core.services import DeploymentService
from src.app.runtime.config.config_data import ConfigData

NO_TOKEN_MESSAGE = "No token provided"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller, taken from the bearer token claims."""

    user_id: str
    username: str | None = None


def get_config(request: Request) -> ConfigData:
    return request.app.state.config


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_deployment_service(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> DeploymentService:
    return app_deps.deployment_service


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: ConfigData = Depends(get_config),
) -> CurrentUser:
    """Resolve the caller from an ``Authorization: Bearer <jwt>`` header.

    The token must be signed with the configured secret and carry a
    ``userId`` claim; ``username`` is optional.

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized(NO_TOKEN_MESSAGE)

    try:
        claims = jwt.decode(
            credentials.credentials,
            config.auth.jwt_secret,
            algorithms=[config.auth.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired bearer token")
        raise _unauthorized(INVALID_TOKEN_MESSAGE)
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected invalid bearer token: {e}")
        raise _unauthorized(INVALID_TOKEN_MESSAGE)

    user_id = claims.get("userId")
    if user_id is None or user_id == "":
        logger.debug("Rejected bearer token without a userId claim")
        raise _unauthorized(INVALID_TOKEN_MESSAGE)

    username = claims.get("username")
    return CurrentUser(
        user_id=str(user_id),
        username=str(username) if username is not None else None,
    )
