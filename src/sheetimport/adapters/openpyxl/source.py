"""Data sources reading import items from the rows of a worksheet.

Layout of a sheet:

- one header row (row 1 unless configured) naming the columns;
- optional instruction columns ``INSERT``, ``UPDATE``, ``MERGE``, ``REMOVE``,
  ``FORCE`` and ``SYNC`` holding ``Y``/``N`` flags;
- for entity sheets, the audit columns ``ID``, ``CREATION_DATE``,
  ``UPDATE_DATE`` and ``VERSION``;
- any payload columns the concrete source knows how to marshal.

Each non-blank data row becomes one ``ImportItem`` keyed by its row number.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC
from typing import TYPE_CHECKING, Any, ClassVar, Self

from sheetimport.config.dataimport import DEFAULT_HEADER_ROW
from sheetimport.domain.dataimport import ImportInstructions, ImportItem, ImportResult
from sheetimport.domain.errors import CursorNotPositionedError, InvalidArgumentError
from sheetimport.domain.model import Entity, IdentityEntity, UUIDEntity

from .errors import DocumentClosedError, DocumentFormatError
from .workbook import CellType, WorkbookDocument

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping
    from datetime import datetime
    from os import PathLike
    from types import TracebackType

    from .workbook import SheetRef

log = logging.getLogger(__name__)


def _column_key(label: str) -> str:
    return label.strip().upper()


class SheetDataSource[TEntity](ABC):
    """Forward-only cursor over the data rows of a worksheet."""

    INSTRUCTION_COLUMNS: ClassVar[Mapping[str, str]] = {
        flag: flag.upper() for flag in ImportInstructions.FLAGS
    }

    def __init__(
        self,
        document: WorkbookDocument,
        *,
        header_row: int = DEFAULT_HEADER_ROW,
        default_instructions: ImportInstructions | None = None,
    ) -> None:
        if header_row < 1:
            raise InvalidArgumentError(f"header_row must be positive, got {header_row}")
        self.document = document
        self.header_row = header_row
        self.default_instructions = default_instructions or ImportInstructions()
        self._columns: dict[str, int] = {}
        self._row: int | None = None
        self._current: ImportItem[int, TEntity] | None = None

    @classmethod
    def from_path(
        cls,
        path: str | PathLike[str],
        *,
        sheet: SheetRef = 0,
        **kwargs: Any,
    ) -> Self:
        return cls(WorkbookDocument(path, sheet=sheet), **kwargs)

    # ------------------------------------------------------------------ lifecycle

    def open(self) -> None:
        self.document.open()
        try:
            self._columns = self._read_columns()
        except BaseException:
            self.document.close()
            raise
        self._row = None
        self._current = None
        log.debug("Columns of %r: %s", self.document, ", ".join(self._columns))

    def close(self) -> None:
        self._row = None
        self._current = None
        self._columns = {}
        self.document.close()

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

    def _read_columns(self) -> dict[str, int]:
        columns: dict[str, int] = {}
        for index, label in enumerate(self.document.header(self.header_row), start=1):
            if label is None:
                continue
            key = _column_key(label)
            if key in columns:
                raise DocumentFormatError(f"Duplicate column {label!r} in header row")
            columns[key] = index
        return columns

    def _require_open(self) -> None:
        if not self.document.is_open:
            raise DocumentClosedError(f"{self.document!r} is not open")

    def _cursor_row(self) -> int:
        self._require_open()
        if self._row is None:
            raise CursorNotPositionedError("No current row; call next() first")
        return self._row

    # ------------------------------------------------------------------ iteration

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> ImportItem[int, TEntity]:
        self._require_open()
        last_row = self.document.max_row
        row = (self._row if self._row is not None else self.header_row) + 1
        while row <= last_row and self.document.is_blank_row(row):
            row += 1
        if row > last_row:
            self._row = max(last_row, self.header_row)
            self._current = None
            raise StopIteration
        self._row = row
        self._current = self._materialize(row)
        return self._current

    def current(self) -> ImportItem[int, TEntity]:
        self._cursor_row()
        if self._current is None:
            raise CursorNotPositionedError("No current row; call next() first")
        return self._current

    def _materialize(self, row: int, result: ImportResult | None = None) -> ImportItem[int, TEntity]:
        return ImportItem(
            id=row,
            data=self.read_current_item_data(),
            instructions=self.read_current_instructions(),
            result=result if result is not None else ImportResult(),
        )

    def read_current_instructions(self) -> ImportInstructions:
        """Y/N cells of the current row; missing columns and blanks keep the defaults."""
        flags: dict[str, bool] = {}
        for flag, column in self.INSTRUCTION_COLUMNS.items():
            if not self.has_column(column):
                continue
            value = self.read_column(column, CellType.YES_NO)
            if value is not None:
                flags[flag] = value
        return self.default_instructions.with_flags(**flags)

    @abstractmethod
    def read_current_item_data(self) -> TEntity:
        """Build the payload of the row under the cursor."""

    # ------------------------------------------------------------------ columns

    def has_column(self, name: str) -> bool:
        return _column_key(name) in self._columns

    def column_index(self, name: str) -> int:
        self._require_open()
        try:
            return self._columns[_column_key(name)]
        except KeyError as exc:
            raise DocumentFormatError(f"Sheet has no column named {name!r}") from exc

    def read_column(self, name: str, cell_type: CellType) -> Any:
        return self.document.read_cell(self._cursor_row(), self.column_index(name), cell_type)

    def write_column(self, row: int, name: str, cell_type: CellType, value: Any) -> bool:
        return self.document.write_cell(row, self.column_index(name), cell_type, value)

    # ------------------------------------------------------------------ write-back

    def sync(self, item: ImportItem[Hashable, TEntity]) -> ImportItem[int, TEntity]:
        row = self.current().id
        if item.id != row:
            raise InvalidArgumentError(f"Item for row {item.id} is not at the cursor (row {row})")
        item.result.row_changed = self.sync_row(row, item.data)
        self._current = self._materialize(row, result=item.result)
        return self._current

    @abstractmethod
    def sync_row(self, row: int, data: TEntity) -> bool:
        """Write ``data`` into ``row`` and report whether any cell changed."""


class EntitySheetDataSource[TId, TEntity: Entity[Any]](SheetDataSource[TEntity]):
    """Sheet source for entities: identifier and audit metadata live in fixed columns."""

    ID_COLUMN: ClassVar[str] = "ID"
    CREATION_DATE_COLUMN: ClassVar[str] = "CREATION_DATE"
    UPDATE_DATE_COLUMN: ClassVar[str] = "UPDATE_DATE"
    VERSION_COLUMN: ClassVar[str] = "VERSION"

    @abstractmethod
    def create_entity_instance(self) -> TEntity: ...

    @abstractmethod
    def read_entity_id(self, column_name: str) -> TId | None: ...

    @abstractmethod
    def write_entity_id(self, row: int, column_name: str, entity_id: TId | None) -> bool: ...

    def read_item_data(self, entity: TEntity) -> None:  # noqa: B027
        """Fill the payload of ``entity`` from the current row."""

    @abstractmethod
    def write_item_data(self, row: int, entity: TEntity) -> bool: ...

    def read_current_item_data(self) -> TEntity:
        entity = self.create_entity_instance()
        entity_id = self.read_entity_id(self.ID_COLUMN)
        if entity_id is not None:
            entity.id = entity_id
        entity.creation_date = self._read_timestamp(self.CREATION_DATE_COLUMN)
        entity.update_date = self._read_timestamp(self.UPDATE_DATE_COLUMN)
        if self.has_column(self.VERSION_COLUMN):
            entity.version = self.read_column(self.VERSION_COLUMN, CellType.INT)
        self.read_item_data(entity)
        return entity

    def sync_row(self, row: int, data: TEntity) -> bool:
        changed = False
        if data.id is not None:
            changed = self.write_entity_id(row, self.ID_COLUMN, data.id)
        for column, value in (
            (self.CREATION_DATE_COLUMN, data.creation_date),
            (self.UPDATE_DATE_COLUMN, data.update_date),
        ):
            if self.has_column(column):
                changed = self.write_column(row, column, CellType.DATETIME, value) or changed
        if self.has_column(self.VERSION_COLUMN):
            changed = self.write_column(row, self.VERSION_COLUMN, CellType.INT, data.version) or changed
        return self.write_item_data(row, data) or changed

    def _read_timestamp(self, column: str) -> datetime | None:
        if not self.has_column(column):
            return None
        value = self.read_column(column, CellType.DATETIME)
        return None if value is None else value.replace(tzinfo=UTC)


class IdentityEntitySheetDataSource[TEntity: IdentityEntity](EntitySheetDataSource[int, TEntity]):
    """Integer identifiers assigned by the store."""

    def read_entity_id(self, column_name: str) -> int | None:
        return self.read_column(column_name, CellType.INT)

    def write_entity_id(self, row: int, column_name: str, entity_id: int | None) -> bool:
        return self.write_column(row, column_name, CellType.INT, entity_id)


class UUIDEntitySheetDataSource[TEntity: UUIDEntity](EntitySheetDataSource[str, TEntity]):
    """String UUID identifiers; rows without one get a generated identifier."""

    def read_entity_id(self, column_name: str) -> str | None:
        value = self.read_column(column_name, CellType.STRING)
        if value is None or not value.strip():
            return None
        return value.strip()

    def write_entity_id(self, row: int, column_name: str, entity_id: str | None) -> bool:
        return self.write_column(row, column_name, CellType.STRING, entity_id)
