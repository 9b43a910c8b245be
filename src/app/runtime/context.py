"""Process-wide access to the loaded configuration."""

import os
from functools import lru_cache
from pathlib import Path

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_loader import CONFIG_PATH, load_config


@lru_cache(maxsize=1)
def get_config() -> ConfigData:
    """Load and cache the application configuration.

    The file location defaults to ``config.yaml`` in the working directory
    and can be overridden with the ``CONFIG_PATH`` environment variable.
    """
    return load_config(Path(os.getenv("CONFIG_PATH", str(CONFIG_PATH))))


def reset_config() -> None:
    """Drop the cached configuration so the next call reloads it."""
    get_config.cache_clear()
