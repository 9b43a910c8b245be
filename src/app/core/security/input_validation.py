"""Validation of untrusted repository and Helm install strings.

The checks here are a deny-list on shell metacharacters, not an allow-list
on content. The optional ``allowlist`` token policy adds a per-token grammar
on top of the deny-list for deployments that want the stricter boundary.

All rejections raise :class:`ValidationRejection` with a generic message.
The specific reason is logged at debug level and never returned to callers.
"""

from __future__ import annotations

import re
from typing import Any, Literal
from urllib.parse import urlparse

from loguru import logger

from src.app.core.errors import ValidationRejection
from src.app.core.security.models import RepositorySpec, ValidatedCommandLine

TokenPolicy = Literal["denylist", "allowlist"]

RESERVED_CHARACTERS = frozenset(";|&$`(){}<>\n\r")
CONTROL_CHARACTERS = frozenset(chr(code) for code in [*range(0x20), 0x7F]) - {"\t"}
REPOSITORY_MAX_LENGTH = 500
HELM_INSTALL_MAX_LENGTH = 1000

REPOSITORY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
ALLOWLIST_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_.\-=/:]+$")

INVALID_INPUT_MESSAGE = "Invalid input"
INVALID_REPOSITORY_MESSAGE = "Invalid repository configuration"
INVALID_HELM_INSTALL_MESSAGE = "Invalid helm install command"


def validate_input(
    raw: Any, max_length: int, *, message: str = INVALID_INPUT_MESSAGE
) -> str:
    """Check a raw string for emptiness, length and reserved characters.

    Args:
        raw: Untrusted value, expected to be a string
        max_length: Maximum length of the trimmed string
        message: Generic message for the raised rejection

    Returns:
        The input with surrounding whitespace removed

    Raises:
        ValidationRejection: If the input is not a non-empty string within
            ``max_length`` that is free of reserved and control characters
    """
    if not isinstance(raw, str) or not raw:
        raise _reject(message, "input is empty or not a string")

    # Checked before trimming so a trailing newline cannot be stripped away.
    found = RESERVED_CHARACTERS.intersection(raw)
    if found:
        raise _reject(message, f"input contains reserved characters {sorted(found)!r}")
    if not CONTROL_CHARACTERS.isdisjoint(raw):
        raise _reject(message, "input contains control characters")

    trimmed = raw.strip()
    if not trimmed:
        raise _reject(message, "input is blank")
    if len(trimmed) > max_length:
        raise _reject(
            message, f"input length {len(trimmed)} exceeds maximum {max_length}"
        )

    return trimmed


def validate_repository(
    raw: Any, *, max_length: int = REPOSITORY_MAX_LENGTH
) -> RepositorySpec:
    """Parse ``"<name> <https-url>"`` into a :class:`RepositorySpec`.

    Every failure produces the same ``Invalid repository configuration``
    message so the validator cannot be probed one check at a time.

    Raises:
        ValidationRejection: If the string is not exactly a valid name
            followed by an https URL
    """
    trimmed = validate_input(raw, max_length, message=INVALID_REPOSITORY_MESSAGE)

    parts = trimmed.split()
    if len(parts) != 2:
        raise _reject(
            INVALID_REPOSITORY_MESSAGE, f"expected 2 tokens, got {len(parts)}"
        )

    name, url = parts
    if not REPOSITORY_NAME_PATTERN.match(name):
        raise _reject(INVALID_REPOSITORY_MESSAGE, "repository name is malformed")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise _reject(INVALID_REPOSITORY_MESSAGE, f"url does not parse: {e}") from e

    if parsed.scheme != "https":
        raise _reject(
            INVALID_REPOSITORY_MESSAGE, f"url scheme {parsed.scheme!r} is not https"
        )
    if not parsed.netloc or not parsed.hostname:
        raise _reject(INVALID_REPOSITORY_MESSAGE, "url has no host")

    return RepositorySpec(name=name, url=url)


def validate_helm_install(
    raw: Any,
    *,
    max_length: int = HELM_INSTALL_MAX_LENGTH,
    token_policy: TokenPolicy = "denylist",
) -> ValidatedCommandLine:
    """Split a Helm install line into validated argument tokens.

    No structural check happens here; flag handling belongs to the value
    parser.

    Args:
        raw: Untrusted install line, e.g. ``"rel repo/chart --set a=1"``
        max_length: Maximum length of the trimmed line
        token_policy: ``denylist`` (reserved characters only) or
            ``allowlist`` (every token must match the token grammar)

    Raises:
        ValidationRejection: If the line fails validation
    """
    trimmed = validate_input(raw, max_length, message=INVALID_HELM_INSTALL_MESSAGE)
    tokens = tuple(trimmed.split())

    if token_policy == "allowlist":
        for token in tokens:
            if not ALLOWLIST_TOKEN_PATTERN.match(token):
                raise _reject(
                    INVALID_HELM_INSTALL_MESSAGE,
                    f"token {token!r} is outside the allowed grammar",
                )

    return ValidatedCommandLine(tokens=tokens)


def _reject(message: str, reason: str) -> ValidationRejection:
    logger.debug(f"Input rejected ({message}): {reason}")
    return ValidationRejection(message, details=reason)
