from .canonical import CANONICAL_SHEETS, TRADE_COLUMNS, export_canonical_workbook, read_canonical_workbook
from .columns import ColumnMap
from .csv_export import CSV_HEADERS, csv_filename, write_csv
from .workbook import MAX_FILE_SIZE, SpreadsheetError
from .xlsx import (
    HEADERS,
    JOURNAL_FILENAME,
    MAX_TRADES,
    SHEET_NAME,
    AppendResult,
    ImportResult,
    append_to_workbook,
    export_workbook,
    read_trades,
)

__all__ = [
    "AppendResult",
    "CANONICAL_SHEETS",
    "CSV_HEADERS",
    "ColumnMap",
    "HEADERS",
    "ImportResult",
    "JOURNAL_FILENAME",
    "MAX_FILE_SIZE",
    "MAX_TRADES",
    "SHEET_NAME",
    "SpreadsheetError",
    "TRADE_COLUMNS",
    "append_to_workbook",
    "csv_filename",
    "export_canonical_workbook",
    "export_workbook",
    "read_canonical_workbook",
    "read_trades",
    "write_csv",
]
