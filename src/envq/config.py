"""
Runtime configuration for envq, read from environment variables.

- ENVQ_LOG_LEVEL: logging level name (default WARNING)
- ENVQ_PRESERVE_MODE: keep file permissions when rewriting (default on)
"""

import logging
import os
from dataclasses import dataclass

DEFAULT_LOG_LEVEL = "WARNING"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def _env_log_level(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip().upper()
    if value and isinstance(logging.getLevelName(value), int):
        return value
    return default


@dataclass
class EnvqConfig:
    """Settings shared by all envq commands."""
    log_level: str = DEFAULT_LOG_LEVEL
    preserve_mode: bool = True


def load_config() -> EnvqConfig:
    """Build the configuration from the current environment."""
    return EnvqConfig(
        log_level=_env_log_level("ENVQ_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        preserve_mode=_env_bool("ENVQ_PRESERVE_MODE", True),
    )
