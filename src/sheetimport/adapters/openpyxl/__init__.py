"""openpyxl-backed spreadsheet documents and sheet data sources."""

from __future__ import annotations

from .errors import (
    DocumentClosedError,
    DocumentError,
    DocumentFileError,
    DocumentFormatError,
    DocumentIOError,
)
from .source import (
    EntitySheetDataSource,
    IdentityEntitySheetDataSource,
    SheetDataSource,
    UUIDEntitySheetDataSource,
)
from .workbook import CellType, WorkbookDocument

__all__ = [
    "CellType",
    "DocumentClosedError",
    "DocumentError",
    "DocumentFileError",
    "DocumentFormatError",
    "DocumentIOError",
    "EntitySheetDataSource",
    "IdentityEntitySheetDataSource",
    "SheetDataSource",
    "UUIDEntitySheetDataSource",
    "WorkbookDocument",
]
