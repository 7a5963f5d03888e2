#!/usr/bin/env python3
"""
Runtime configuration for the converter, CLI and HTTP API.

Values come from a .env file (if present) and the process environment, all
prefixed with RIDE_INVOICE_. The resulting ConverterConfig is passed around
explicitly rather than read from module globals.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "RIDE_INVOICE_"


def _env_str(name: str, default: str) -> str:
    value = os.getenv(ENV_PREFIX + name)
    return value.strip() if value and value.strip() else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_PREFIX + name}={value!r}, using {default}")
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(ENV_PREFIX + name)
    if not value:
        return list(default)
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or list(default)


def _env_log_level(name: str, default: str) -> str:
    value = _env_str(name, default).upper()
    # getLevelName maps known names to their int level
    if not isinstance(logging.getLevelName(value), int):
        logger.warning(f"Ignoring unknown {ENV_PREFIX + name}={value!r}, using {default}")
        return default
    return value


@dataclass
class ConverterConfig:
    """Settings for one converter / app instance."""
    y_precision: int = 1
    currency_marker: str = "NZ$"
    max_upload_bytes: int = 10 * 1024 * 1024
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ConverterConfig":
        """Build a config from .env and environment variables."""
        load_dotenv(env_file)
        defaults = cls()
        config = cls(
            y_precision=_env_int("Y_PRECISION", defaults.y_precision),
            currency_marker=_env_str("CURRENCY", defaults.currency_marker),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
            cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
            host=_env_str("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            log_level=_env_log_level("LOG_LEVEL", defaults.log_level),
        )
        if config.y_precision < 0:
            logger.warning(f"Negative y precision {config.y_precision}, using {defaults.y_precision}")
            config.y_precision = defaults.y_precision
        return config
