"""Error hierarchy shared by the import domain and its adapters."""

from __future__ import annotations


class DataImportError(Exception):
    """Base class for every error raised while importing rows."""


class InvalidArgumentError(DataImportError, ValueError):
    """Raised when a mandatory argument is missing or malformed."""

    @classmethod
    def null_argument(cls, name: str) -> InvalidArgumentError:
        return cls(f"Argument '{name}' must not be None")


class DataSourceError(DataImportError):
    """Raised by tabular record sources."""


class CursorNotPositionedError(DataSourceError):
    """Raised when the current row is requested before advancing the cursor."""


class RepositoryError(DataImportError):
    """Raised when the destination store fails to look up or persist an entity."""


class DuplicateEntityError(RepositoryError):
    """Raised when persisting an entity whose identifier already exists."""


class ConcurrencyConflictError(RepositoryError):
    """Raised when the stored version no longer matches the one being written."""
