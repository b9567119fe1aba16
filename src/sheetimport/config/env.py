"""Typed readers for optional environment settings.

Unset or blank variables fall back to the caller's default.
"""

from __future__ import annotations

import os

from .errors import InvalidSettingError

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


def _raw_setting(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def env_flag(name: str, *, default: bool = False) -> bool:
    raw = _raw_setting(name)
    if raw is None:
        return default
    value = raw.lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidSettingError(name, raw, "a boolean flag")


def env_positive_int(name: str, *, default: int) -> int:
    raw = _raw_setting(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidSettingError(name, raw, "an integer") from exc
    if value < 1:
        raise InvalidSettingError(name, raw, "a positive integer")
    return value


def env_text(name: str) -> str | None:
    """Return the stripped value of ``name`` or ``None`` when unset or blank."""

    return _raw_setting(name)
