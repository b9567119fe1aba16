"""Errors raised by the spreadsheet document layer."""

from __future__ import annotations

from sheetimport.domain.errors import DataSourceError


class DocumentError(DataSourceError):
    """Raised for document lifecycle problems (missing sheet, row or cell)."""


class DocumentClosedError(DocumentError):
    """Raised when reading or writing a document that is not open."""


class DocumentFileError(DocumentError):
    """Raised when the underlying file is missing, unreadable or unwritable."""


class DocumentIOError(DocumentError):
    """Raised when reading, saving or releasing the document fails."""


class DocumentFormatError(DocumentError):
    """Raised when a cell does not hold the expected typed content."""
