"""Typed cell access on top of an openpyxl workbook.

One ``WorkbookDocument`` owns one workbook and one working sheet for its
open/close lifetime. Rows and columns are 1-based, as in openpyxl.

Every ``write_*`` call reports whether the effective content of the cell
changed; callers use that to decide whether a row was touched at all.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC, date, datetime, time, timedelta
from enum import StrEnum
from os import PathLike
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Self
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from openpyxl.utils.exceptions import InvalidFileException

from sheetimport.domain.errors import InvalidArgumentError

from .errors import (
    DocumentClosedError,
    DocumentError,
    DocumentFileError,
    DocumentFormatError,
    DocumentIOError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from openpyxl.cell.cell import Cell
    from openpyxl.workbook.workbook import Workbook
    from openpyxl.worksheet.worksheet import Worksheet

log = logging.getLogger(__name__)

YES = "Y"
NO = "N"
# serial day numbers lose a few microseconds on the way through the file
_DATETIME_TOLERANCE = timedelta(microseconds=500)

type SheetRef = int | str


class CellType(StrEnum):
    STRING = "string"
    CHAR = "char"
    FLOAT = "float"
    INT = "int"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    YES_NO = "yes_no"


class WorkbookDocument:
    """A spreadsheet file (or stream) with a working sheet and typed cells."""

    def __init__(self, source: str | PathLike[str] | IO[bytes], *, sheet: SheetRef | None = 0) -> None:
        if source is None:
            raise InvalidArgumentError.null_argument("source")
        self._path: Path | None = None
        self._stream: IO[bytes] | None = None
        if isinstance(source, (str, PathLike)):
            path = Path(source)
            if not path.is_file():
                raise DocumentFileError(f"Workbook file not found: {path}")
            if not os.access(path, os.R_OK):
                raise DocumentFileError(f"Workbook file is not readable: {path}")
            self._path = path
        else:
            self._stream = source
        self._sheet_ref = sheet
        self._workbook: Workbook | None = None
        self._sheet: Worksheet | None = None

    def __repr__(self) -> str:
        origin = self._path if self._path is not None else "<stream>"
        return f"{type(self).__name__}({origin!s}, sheet={self._sheet_ref!r})"

    # ------------------------------------------------------------------ lifecycle

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def writable(self) -> bool:
        """Only documents backed by a writable file are flushed on close."""
        return self._path is not None and os.access(self._path, os.W_OK)

    @property
    def is_open(self) -> bool:
        return self._workbook is not None

    def open(self) -> None:
        if self._workbook is not None:
            raise DocumentError(f"{self!r} is already open")
        if self._sheet_ref is None:
            raise DocumentError(f"{self!r} has no working sheet")
        origin = self._path if self._path is not None else self._stream
        try:
            workbook = load_workbook(origin)
        except FileNotFoundError as exc:
            raise DocumentFileError(f"Workbook file not found: {self._path}") from exc
        except PermissionError as exc:
            raise DocumentFileError(f"Workbook file is not readable: {self._path}") from exc
        except (InvalidFileException, BadZipFile, KeyError) as exc:
            raise DocumentError(f"{self!r} is not a valid .xlsx workbook") from exc
        except OSError as exc:
            raise DocumentIOError(f"Failed to read {self!r}") from exc
        self._workbook = workbook
        try:
            self._sheet = self._resolve_sheet(workbook, self._sheet_ref)
        except DocumentError:
            self._workbook = None
            workbook.close()
            raise
        log.debug("Opened %r (%s rows)", self, self.max_row)

    def close(self) -> None:
        """Flush when writable, then release the workbook on every path."""

        workbook = self._require_workbook()
        self._workbook = None
        self._sheet = None
        try:
            if self.writable:
                self._flush(workbook)
        except BaseException:
            self._release_after_failure(workbook)
            raise
        self._release(workbook)
        log.debug("Closed %r", self)

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _flush(self, workbook: Workbook) -> None:
        assert self._path is not None
        try:
            workbook.save(self._path)
        except PermissionError as exc:
            raise DocumentFileError(f"Workbook file is not writable: {self._path}") from exc
        except OSError as exc:
            raise DocumentIOError(f"Failed to save {self!r}") from exc

    def _release(self, workbook: Workbook) -> None:
        try:
            workbook.close()
        except OSError as exc:
            raise DocumentIOError(f"Failed to release {self!r}") from exc

    def _release_after_failure(self, workbook: Workbook) -> None:
        try:
            workbook.close()
        except OSError as exc:
            log.warning("Failed to release %r after an earlier error: %s", self, exc)

    # ------------------------------------------------------------------ sheet

    def set_working_sheet(self, sheet: SheetRef) -> None:
        if self._workbook is not None:
            self._sheet = self._resolve_sheet(self._workbook, sheet)
        self._sheet_ref = sheet

    @property
    def working_sheet(self) -> Worksheet:
        self._require_workbook()
        assert self._sheet is not None
        return self._sheet

    @property
    def max_row(self) -> int:
        return self.working_sheet.max_row

    @property
    def max_column(self) -> int:
        return self.working_sheet.max_column

    def header(self, row: int) -> list[str | None]:
        """Stripped labels of ``row``; blank header cells yield ``None``."""
        self._check_row(row)
        labels: list[str | None] = []
        for column in range(1, self.max_column + 1):
            value = self.working_sheet.cell(row=row, column=column).value
            label = None if value is None else str(value).strip()
            labels.append(label or None)
        return labels

    def is_blank_row(self, row: int) -> bool:
        self._check_row(row)
        return all(
            _is_blank(self.working_sheet.cell(row=row, column=column).value)
            for column in range(1, self.max_column + 1)
        )

    @staticmethod
    def _resolve_sheet(workbook: Workbook, sheet: SheetRef) -> Worksheet:
        if isinstance(sheet, int):
            try:
                return workbook.worksheets[sheet]
            except IndexError as exc:
                raise DocumentError(f"Workbook has no sheet at index {sheet}") from exc
        try:
            return workbook[sheet]
        except KeyError as exc:
            raise DocumentError(f"Workbook has no sheet named {sheet!r}") from exc

    # ------------------------------------------------------------------ cells

    def _require_workbook(self) -> Workbook:
        if self._workbook is None:
            raise DocumentClosedError(f"{self!r} is not open")
        return self._workbook

    def _check_row(self, row: int) -> None:
        if not 1 <= row <= self.max_row:
            raise DocumentError(f"Row {row} is outside the sheet (1..{self.max_row})")

    def _cell(self, row: int, column: int) -> Cell:
        self._check_row(row)
        if not 1 <= column <= self.max_column:
            raise DocumentError(
                f"Column {column} is outside the sheet (1..{self.max_column})"
            )
        return self.working_sheet.cell(row=row, column=column)

    def _store(self, row: int, column: int, value: object, *, changed: bool) -> bool:
        self._cell(row, column).value = value
        return changed

    def write_blank(self, row: int, column: int) -> bool:
        cell = self._cell(row, column)
        changed = cell.value is not None
        cell.value = None
        return changed

    def read_string_cell(self, row: int, column: int) -> str | None:
        value = self._cell(row, column).value
        if value is None:
            return None
        if not isinstance(value, str):
            raise _format_error(row, column, "text", value)
        return value

    def write_string_cell(self, row: int, column: int, value: str | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        current = self._cell(row, column).value
        return self._store(row, column, value, changed=current != value)

    def read_char_cell(self, row: int, column: int) -> str | None:
        value = self.read_string_cell(row, column)
        if not value:
            return None
        if len(value) > 1:
            raise _format_error(row, column, "a single character", value)
        return value

    def write_char_cell(self, row: int, column: int, value: str | None) -> bool:
        if value is not None and len(value) != 1:
            raise InvalidArgumentError(f"Expected a single character, got {value!r}")
        return self.write_string_cell(row, column, value)

    def read_float_cell(self, row: int, column: int) -> float | None:
        value = self._cell(row, column).value
        if value is None:
            return None
        if not _is_number(value):
            raise _format_error(row, column, "a number", value)
        return float(value)

    def write_float_cell(self, row: int, column: int, value: float | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        current = self._cell(row, column).value
        changed = not (_is_number(current) and current == value)
        return self._store(row, column, float(value), changed=changed)

    def read_int_cell(self, row: int, column: int) -> int | None:
        value = self._cell(row, column).value
        if value is None:
            return None
        if not _is_number(value):
            raise _format_error(row, column, "an integer", value)
        if isinstance(value, float) and not value.is_integer():
            raise _format_error(row, column, "an integer", value)
        return int(value)

    def write_int_cell(self, row: int, column: int, value: int | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        current = self._cell(row, column).value
        changed = not (_is_number(current) and current == value)
        return self._store(row, column, int(value), changed=changed)

    def read_bool_cell(self, row: int, column: int) -> bool | None:
        value = self._cell(row, column).value
        if value is None:
            return None
        if not isinstance(value, bool):
            raise _format_error(row, column, "a boolean", value)
        return value

    def write_bool_cell(self, row: int, column: int, value: bool | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        current = self._cell(row, column).value
        changed = not (isinstance(current, bool) and current == value)
        return self._store(row, column, value, changed=changed)

    def read_date_cell(self, row: int, column: int) -> date | None:
        value = self._cell(row, column).value
        if value is None:
            return None
        parsed = _as_datetime(value)
        if parsed is None:
            raise _format_error(row, column, "a date", value)
        return parsed.date()

    def write_date_cell(self, row: int, column: int, value: date | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        if isinstance(value, datetime):
            value = value.date()
        current = _as_datetime(self._cell(row, column).value)
        changed = current is None or current.date() != value or current.time() != time()
        cell = self._cell(row, column)
        cell.value = value
        cell.number_format = "yyyy-mm-dd"
        return changed

    def read_datetime_cell(self, row: int, column: int) -> datetime | None:
        """Naive UTC datetime, as stored."""
        value = self._cell(row, column).value
        if value is None:
            return None
        parsed = _as_datetime(value)
        if parsed is None:
            raise _format_error(row, column, "a date and time", value)
        return parsed

    def write_datetime_cell(self, row: int, column: int, value: datetime | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        stored = _to_cell_datetime(value)
        current = _as_datetime(self._cell(row, column).value)
        changed = current is None or abs(current - stored) >= _DATETIME_TOLERANCE
        return self._store(row, column, stored, changed=changed)

    def read_yes_no_cell(self, row: int, column: int) -> bool | None:
        value = self._cell(row, column).value
        if _is_blank(value):
            return None
        token = value.strip().upper() if isinstance(value, str) else None
        if token == YES:
            return True
        if token == NO:
            return False
        raise _format_error(row, column, f"{YES!r} or {NO!r}", value)

    def write_yes_no_cell(self, row: int, column: int, value: bool | None) -> bool:
        if value is None:
            return self.write_blank(row, column)
        token = YES if value else NO
        current = self._cell(row, column).value
        return self._store(row, column, token, changed=current != token)

    # ------------------------------------------------------------------ dispatch

    def read_cell(self, row: int, column: int, cell_type: CellType) -> Any:
        reader = getattr(self, _READERS[cell_type])
        return reader(row, column)

    def write_cell(self, row: int, column: int, cell_type: CellType, value: Any) -> bool:
        writer = getattr(self, _WRITERS[cell_type])
        return writer(row, column, value)


_READERS: dict[CellType, str] = {
    CellType.STRING: "read_string_cell",
    CellType.CHAR: "read_char_cell",
    CellType.FLOAT: "read_float_cell",
    CellType.INT: "read_int_cell",
    CellType.BOOLEAN: "read_bool_cell",
    CellType.DATE: "read_date_cell",
    CellType.DATETIME: "read_datetime_cell",
    CellType.YES_NO: "read_yes_no_cell",
}

_WRITERS: dict[CellType, str] = {
    cell_type: reader.replace("read_", "write_", 1) for cell_type, reader in _READERS.items()
}


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_datetime(value: object) -> datetime | None:
    """Interpret a cell value as a naive datetime, or ``None`` if it is not one."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if _is_number(value):
        converted = from_excel(value)
        if isinstance(converted, datetime):
            return converted
    return None


def _to_cell_datetime(value: datetime) -> datetime:
    # cells have no time zone and millisecond resolution
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _format_error(row: int, column: int, expected: str, value: object) -> DocumentFormatError:
    return DocumentFormatError(
        f"Cell ({row}, {column}) should hold {expected}, found {value!r}"
    )
