from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from sheetimport.config import ImportConfig, default_data_dir, get_database_config, get_import_config
from sheetimport.config import storage


def test_data_dir_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("SHEETIMPORT_DATA_DIR", str(custom))

    assert default_data_dir() == custom.resolve()


def test_data_dir_falls_back_to_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("SHEETIMPORT_DATA_DIR", raising=False)
    monkeypatch.setattr(storage.os, "name", "posix")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert default_data_dir() == (tmp_path / "sheetimport").resolve()


def test_database_config_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")
    monkeypatch.setenv("SHEETIMPORT_SQL_ECHO", "on")

    assert get_database_config().uri == "sqlite:///override.db"
    assert get_database_config().echo is True
    assert get_database_config(uri="sqlite://").uri == "sqlite://"


def test_database_config_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.delenv("SHEETIMPORT_SQL_ECHO", raising=False)
    monkeypatch.setenv("SHEETIMPORT_DATA_DIR", str(tmp_path / "data-dir"))

    config = get_database_config()

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert config.uri == f"sqlite+pysqlite:///{expected_path}"
    assert config.echo is False
    assert expected_path.parent.exists()


def test_import_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHEETIMPORT_FAIL_FAST", raising=False)
    monkeypatch.delenv("SHEETIMPORT_HEADER_ROW", raising=False)

    assert get_import_config() == ImportConfig()


def test_import_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHEETIMPORT_FAIL_FAST", "yes")
    monkeypatch.setenv("SHEETIMPORT_HEADER_ROW", "3")

    assert get_import_config() == ImportConfig(fail_fast=True, header_row=3)
