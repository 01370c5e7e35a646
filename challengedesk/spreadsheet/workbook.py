"""openpyxl helpers shared by the workbook readers and writers."""

import logging
import math
import zipfile
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

log = logging.getLogger(__name__)


MAX_FILE_SIZE = 10 * 1024 * 1024  # bytes

INTEGER_FORMAT = "0"
LOT_FORMAT = "0.00"
MONEY_FORMAT = "#,##0.00"


class SpreadsheetError(ValueError):
    """A workbook could not be read or written; the message is user-facing."""


def check_file_size(path: Path) -> None:
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise SpreadsheetError("Error reading file. Please try again.") from exc
    if size > MAX_FILE_SIZE:
        raise SpreadsheetError("File size exceeds 10MB limit. Please use a smaller file.")


def open_workbook(path: Path) -> openpyxl.Workbook:
    """Open *path* read-only with cached formula values.

    Raises:
        SpreadsheetError: file too large, unreadable or not a workbook
    """
    path = Path(path)
    check_file_size(path)
    try:
        return openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        log.warning("Failed to open workbook %s: %s", path, exc)
        raise SpreadsheetError(f"Error reading Excel file {path.name}: {exc}") from exc


def sheet_rows(ws: Any) -> list[list[Any]]:
    """All rows of *ws* as lists, without rows that are entirely empty."""
    rows = []
    for values in ws.iter_rows(values_only=True):
        row = list(values)
        if any(v is not None and str(v).strip() != "" for v in row):
            rows.append(row)
    return rows


def read_first_sheet(path: Path) -> tuple[str, list[list[Any]]]:
    """Name and non-empty rows of the first sheet in *path*."""
    wb = open_workbook(path)
    try:
        if not wb.sheetnames:
            raise SpreadsheetError("Invalid Excel file. No sheets found.")
        name = wb.sheetnames[0]
        return name, sheet_rows(wb[name])
    finally:
        wb.close()


def apply_column_formats(
    ws: Worksheet,
    *,
    first_row: int,
    formats: dict[int, str],
) -> None:
    """Set number formats on numeric cells; *formats* maps 0-based column to format."""
    for row in ws.iter_rows(min_row=first_row, max_row=ws.max_row):
        for index, fmt in formats.items():
            if index < len(row) and isinstance(row[index].value, (int, float)):
                row[index].number_format = fmt


def finish_sheet(ws: Worksheet, widths: list[int]) -> None:
    """Column widths, frozen header row and an auto-filter over the data."""
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    ws.freeze_panes = "A2"
    if ws.max_row > 1:
        ws.auto_filter.ref = f"A1:{get_column_letter(ws.max_column)}{ws.max_row}"


def as_float(value: Any) -> float | None:
    """Cell value as a float, ``None`` for blanks and non-numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None
