"""Configuration template substitution utilities."""

import os
import re
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

# Most systems allow far larger values, but secrets never need more than this
MAX_SECRET_SIZE = 32768

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
_SECRETS_LOADED = False


def _get_project_root() -> Path:
    return Path(__file__).resolve().parents[4]


def _candidate_secret_dirs() -> Iterable[Path]:
    custom_dir = os.getenv("SECRETS_KEYS_DIR")
    if custom_dir:
        yield Path(custom_dir)
    yield _get_project_root() / "secrets" / "keys"


def _read_secret(file_path: Path) -> str | None:
    try:
        if file_path.stat().st_size > MAX_SECRET_SIZE:
            logger.warning(
                f"Secret file {file_path.name} exceeds {MAX_SECRET_SIZE} bytes, skipping"
            )
            return None
        value = file_path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning(f"Unable to read secret file {file_path}: {exc}")
        return None
    return value or None


def load_secret_files_into_env() -> None:
    """Expose files from the first existing secrets directory as env vars.

    ``secrets/keys/jwt_secret`` becomes ``JWT_SECRET``. Variables that are
    already set are never overwritten. Runs once per process.
    """
    global _SECRETS_LOADED
    if _SECRETS_LOADED:
        return

    for directory in _candidate_secret_dirs():
        if not directory.is_dir():
            continue

        for file_path in sorted(directory.iterdir()):
            if not file_path.is_file():
                continue

            env_name = "".join(
                c if c.isalnum() or c == "_" else "_" for c in file_path.stem.upper()
            )
            if not env_name or env_name in os.environ:
                continue

            value = _read_secret(file_path)
            if value is None:
                continue

            os.environ[env_name] = value
            logger.debug(f"Loaded secret {env_name} from {file_path.name}")

        break

    _SECRETS_LOADED = True


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    Raises:
        ValueError: If a required variable is not set
    """
    load_secret_files_into_env()

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return _ENV_PATTERN.sub(replacer, text)
