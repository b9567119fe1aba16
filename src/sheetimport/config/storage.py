"""Where the entity store lives when no database URI is given."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag, env_text

APP_DIR_NAME: Final[str] = "sheetimport"
DEFAULT_DB_FILENAME: Final[str] = "sheetimport.db"
DATA_DIR_ENV_VAR: Final[str] = "SHEETIMPORT_DATA_DIR"
DATABASE_URI_ENV_VAR: Final[str] = "DATABASE_URI"
SQL_ECHO_ENV_VAR: Final[str] = "SHEETIMPORT_SQL_ECHO"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def default_data_dir() -> Path:
    """Return the per-user data directory, honouring ``SHEETIMPORT_DATA_DIR``."""

    override = env_text(DATA_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    if os.name == "nt":
        base = env_text("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = env_text("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return (root / APP_DIR_NAME).expanduser().resolve()


def default_database_uri() -> str:
    """SQLite file inside the data directory, which is created on demand."""

    data_dir = default_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite+pysqlite:///{data_dir / DEFAULT_DB_FILENAME}"


def get_database_config(*, uri: str | None = None) -> DatabaseConfig:
    """Explicit ``uri`` wins over ``DATABASE_URI``, which wins over the default file."""

    uri = uri or env_text(DATABASE_URI_ENV_VAR) or default_database_uri()
    return DatabaseConfig(uri=uri, echo=env_flag(SQL_ECHO_ENV_VAR))
