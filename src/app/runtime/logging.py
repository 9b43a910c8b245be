"""Logging setup for the API and CLI."""

import sys

from loguru import logger

from src.app.runtime.config.config_data import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Replace loguru's default sink with one configured stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=config.level.upper(),
        serialize=config.serialize,
        backtrace=False,
        diagnose=False,
    )
    logger.debug(f"Logging configured at level {config.level.upper()}")
