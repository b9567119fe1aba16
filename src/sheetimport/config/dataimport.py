"""Defaults for spreadsheet import runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, env_positive_int

DEFAULT_HEADER_ROW = 1


@dataclass(frozen=True, slots=True)
class ImportConfig:
    fail_fast: bool = False
    header_row: int = DEFAULT_HEADER_ROW


def get_import_config() -> ImportConfig:
    return ImportConfig(
        fail_fast=env_flag("SHEETIMPORT_FAIL_FAST"),
        header_row=env_positive_int("SHEETIMPORT_HEADER_ROW", default=DEFAULT_HEADER_ROW),
    )
