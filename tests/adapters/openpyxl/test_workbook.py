from __future__ import annotations

import io
from datetime import UTC, date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from openpyxl import Workbook, load_workbook

from sheetimport.adapters.openpyxl import (
    CellType,
    DocumentClosedError,
    DocumentError,
    DocumentFileError,
    DocumentFormatError,
    WorkbookDocument,
)
from sheetimport.domain.errors import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


def _write_sheet(path: Path, rows: list[list[object]], *, title: str = "Data") -> Path:
    workbook = Workbook()
    sheet = workbook.active
    assert sheet is not None
    sheet.title = title
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def workbook_path(tmp_path: Path) -> Path:
    return _write_sheet(
        tmp_path / "cells.xlsx",
        [
            ["TEXT", "NUMBER", "FLAG", "WHEN", "ANSWER"],
            ["hello", 42, True, datetime(2024, 3, 1, 8, 30), "y"],
            ["x", 2.5, False, date(2024, 3, 2), "Maybe"],
        ],
    )


@pytest.fixture
def document(workbook_path: Path) -> Iterator[WorkbookDocument]:
    with WorkbookDocument(workbook_path) as opened:
        yield opened


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(DocumentFileError):
        WorkbookDocument(tmp_path / "missing.xlsx")


def test_invalid_file_is_rejected_on_open(tmp_path: Path) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")

    with pytest.raises(DocumentError):
        WorkbookDocument(path).open()


def test_open_twice_is_rejected(document: WorkbookDocument) -> None:
    with pytest.raises(DocumentError):
        document.open()


def test_unknown_sheet_is_rejected(workbook_path: Path) -> None:
    with pytest.raises(DocumentError):
        WorkbookDocument(workbook_path, sheet="Nope").open()
    with pytest.raises(DocumentError):
        WorkbookDocument(workbook_path, sheet=3).open()


def test_working_sheet_by_title(workbook_path: Path) -> None:
    with WorkbookDocument(workbook_path, sheet="Data") as document:
        assert document.working_sheet.title == "Data"
        assert document.max_row == 3


def test_no_working_sheet_is_rejected(workbook_path: Path) -> None:
    with pytest.raises(DocumentError):
        WorkbookDocument(workbook_path, sheet=None).open()


def test_closed_document_rejects_access(workbook_path: Path) -> None:
    document = WorkbookDocument(workbook_path)
    document.open()
    document.close()

    assert not document.is_open
    with pytest.raises(DocumentClosedError):
        document.read_string_cell(2, 1)
    with pytest.raises(DocumentClosedError):
        document.close()


def test_header_labels_are_stripped(tmp_path: Path) -> None:
    path = _write_sheet(tmp_path / "header.xlsx", [[" Name ", None, "AGE"]])

    with WorkbookDocument(path) as document:
        assert document.header(1) == ["Name", None, "AGE"]


def test_typed_reads(document: WorkbookDocument) -> None:
    assert document.read_string_cell(2, 1) == "hello"
    assert document.read_char_cell(3, 1) == "x"
    assert document.read_int_cell(2, 2) == 42
    assert document.read_float_cell(3, 2) == 2.5
    assert document.read_bool_cell(2, 3) is True
    assert document.read_datetime_cell(2, 4) == datetime(2024, 3, 1, 8, 30)
    assert document.read_date_cell(3, 4) == date(2024, 3, 2)
    assert document.read_yes_no_cell(2, 5) is True


@pytest.mark.parametrize(
    ("cell_type", "row", "column"),
    [
        (CellType.CHAR, 2, 1),
        (CellType.INT, 3, 2),
        (CellType.INT, 2, 1),
        (CellType.FLOAT, 2, 3),
        (CellType.BOOLEAN, 2, 2),
        (CellType.DATETIME, 2, 1),
        (CellType.YES_NO, 3, 5),
        (CellType.STRING, 2, 2),
    ],
)
def test_format_errors(document: WorkbookDocument, cell_type: CellType, row: int, column: int) -> None:
    with pytest.raises(DocumentFormatError):
        document.read_cell(row, column, cell_type)


def test_out_of_range_cells_are_rejected(document: WorkbookDocument) -> None:
    with pytest.raises(DocumentError):
        document.read_string_cell(10, 1)
    with pytest.raises(DocumentError):
        document.read_string_cell(2, 9)
    with pytest.raises(DocumentError):
        document.write_string_cell(0, 1, "x")


@pytest.mark.parametrize(
    ("cell_type", "value"),
    [
        (CellType.STRING, "world"),
        (CellType.CHAR, "z"),
        (CellType.FLOAT, 3.25),
        (CellType.INT, 7),
        (CellType.BOOLEAN, False),
        (CellType.DATE, date(2023, 12, 24)),
        (CellType.DATETIME, datetime(2023, 12, 24, 18, 0, 5)),
        (CellType.YES_NO, False),
    ],
)
def test_write_reports_change_once(document: WorkbookDocument, cell_type: CellType, value: object) -> None:
    assert document.write_cell(3, 1, cell_type, value) is True
    assert document.read_cell(3, 1, cell_type) == value
    assert document.write_cell(3, 1, cell_type, value) is False


def test_writing_none_blanks_the_cell(document: WorkbookDocument) -> None:
    assert document.write_cell(2, 1, CellType.STRING, None) is True
    assert document.read_string_cell(2, 1) is None
    assert document.write_cell(2, 1, CellType.STRING, None) is False
    assert document.write_blank(2, 2) is True


def test_blanking_whitespace_reports_the_change(document: WorkbookDocument) -> None:
    document.working_sheet.cell(row=3, column=1).value = "   "

    assert document.write_blank(3, 1) is True
    assert document.working_sheet.cell(row=3, column=1).value is None
    assert document.write_blank(3, 1) is False


def test_yes_no_written_upper_case(document: WorkbookDocument) -> None:
    assert document.write_yes_no_cell(2, 5, True) is True
    assert document.working_sheet.cell(row=2, column=5).value == "Y"
    assert document.write_yes_no_cell(2, 5, True) is False


def test_int_and_float_writes_compare_numerically(document: WorkbookDocument) -> None:
    assert document.write_float_cell(2, 2, 42.0) is False
    assert document.write_int_cell(2, 2, 43) is True


def test_char_write_rejects_longer_text(document: WorkbookDocument) -> None:
    with pytest.raises(InvalidArgumentError):
        document.write_char_cell(2, 1, "ab")


def test_aware_datetimes_are_stored_as_utc(document: WorkbookDocument) -> None:
    value = datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))

    assert document.write_datetime_cell(2, 4, value) is True

    assert document.read_datetime_cell(2, 4) == datetime(2024, 1, 1, 10, 0, 0, 123000)
    assert document.write_datetime_cell(2, 4, value.astimezone(UTC)) is False


def test_datetime_write_ignores_serial_rounding(document: WorkbookDocument) -> None:
    written = datetime(2024, 5, 6, 7, 8, 9, 250000)
    document.working_sheet.cell(row=2, column=4).value = written + timedelta(microseconds=3)

    assert document.write_datetime_cell(2, 4, written) is False
    assert document.write_datetime_cell(2, 4, written + timedelta(milliseconds=1)) is True


def test_close_flushes_writes_to_disk(workbook_path: Path) -> None:
    with WorkbookDocument(workbook_path) as document:
        assert document.writable
        document.write_string_cell(2, 1, "saved")

    reloaded = load_workbook(workbook_path)
    sheet = reloaded.worksheets[0]
    assert sheet.cell(row=2, column=1).value == "saved"


def test_stream_documents_are_read_only(workbook_path: Path) -> None:
    stream = io.BytesIO(workbook_path.read_bytes())

    with WorkbookDocument(stream) as document:
        assert not document.writable
        assert document.write_string_cell(2, 1, "discarded") is True

    reloaded = load_workbook(workbook_path)
    assert reloaded.worksheets[0].cell(row=2, column=1).value == "hello"


def test_failed_flush_still_releases(workbook_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    document = WorkbookDocument(workbook_path)
    document.open()
    workbook = document.working_sheet.parent

    def fail_save(_path: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(workbook, "save", fail_save)

    with pytest.raises(DocumentError, match="Failed to save"):
        document.close()

    assert not document.is_open
