"""Configuration errors."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a setting, profile reference, or command-line value is unusable."""


class InvalidSettingError(ConfigurationError):
    """Raised when an environment variable holds a value of the wrong shape."""

    def __init__(self, name: str, raw: str, expected: str) -> None:
        super().__init__(f"{name} must be {expected}, got {raw!r}")
        self.name = name
        self.raw = raw
