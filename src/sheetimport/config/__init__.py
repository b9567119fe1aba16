"""Application configuration helpers."""

from __future__ import annotations

from .dataimport import DEFAULT_HEADER_ROW, ImportConfig, get_import_config
from .env import env_flag, env_positive_int, env_text
from .errors import ConfigurationError, InvalidSettingError
from .logging import configure_logging
from .storage import DatabaseConfig, default_data_dir, default_database_uri, get_database_config

__all__ = [
    "DEFAULT_HEADER_ROW",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "InvalidSettingError",
    "configure_logging",
    "default_data_dir",
    "default_database_uri",
    "env_flag",
    "env_positive_int",
    "env_text",
    "get_database_config",
    "get_import_config",
]
