"""Trade journal workbooks: create, append to an existing file, import."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook

from challengedesk.risk import as_number, reward_dollars, risk_dollars
from challengedesk.settings import Settings
from challengedesk.spreadsheet.columns import ColumnMap, cell, cell_text
from challengedesk.spreadsheet.workbook import (
    INTEGER_FORMAT,
    LOT_FORMAT,
    MONEY_FORMAT,
    SpreadsheetError,
    apply_column_formats,
    as_float,
    finish_sheet,
    read_first_sheet,
)
from challengedesk.time_utils import format_trade_date, parse_trade_date
from challengedesk.trade import Trade, format_lot, new_trade_id
from challengedesk.types import Outcome, Session

log = logging.getLogger(__name__)


JOURNAL_FILENAME = "XAUUSD_ULTIMATE_TRADING_JOURNAL.xlsx"
SHEET_NAME = "Trading Journal"
MAX_TRADES = 10_000

HEADERS = [
    "Trade #",
    "Date",
    "Session",
    "Entry",
    "Lot Size",
    "Outcome",
    "Risk $",
    "Reward $",
    "Result $",
    "Equity After",
    "Notes",
]
COLUMN_WIDTHS = [8, 11, 10, 10, 9, 10, 15, 15, 15, 15, 40]
_EXPORT_FORMATS = {0: INTEGER_FORMAT, 4: LOT_FORMAT, 6: MONEY_FORMAT, 7: MONEY_FORMAT, 8: MONEY_FORMAT, 9: MONEY_FORMAT}


@dataclass(frozen=True)
class AppendResult:
    path: Path
    added: int
    total_rows: int


@dataclass(frozen=True)
class ImportResult:
    trades: list[Trade]
    skipped_rows: int     # rows without a date or entry
    truncated: int        # valid rows dropped by the trade ceiling


def _export_row(number: int, trade: Trade) -> list[Any]:
    return [
        number,
        trade.date.strip(),
        trade.session.value,
        trade.entry.strip(),
        trade.lot_size,
        trade.outcome.value,
        trade.risk_dollars,
        trade.reward_dollars,
        trade.result_dollars,
        trade.equity_after,
        trade.notes.strip(),
    ]


def export_workbook(trades: Sequence[Trade], out_dir: Path) -> Path:
    """
    Write *trades* to a new single-sheet workbook.

    The file is always named ``JOURNAL_FILENAME`` inside *out_dir*; an
    existing file of that name is replaced.
    """
    if not trades:
        raise SpreadsheetError("No trades to export. Please add trades first.")

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    ws.append(HEADERS)
    for number, trade in enumerate(trades, start=1):
        ws.append(_export_row(number, trade))

    apply_column_formats(ws, first_row=2, formats=_EXPORT_FORMATS)
    finish_sheet(ws, COLUMN_WIDTHS)

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / JOURNAL_FILENAME
    wb.save(path)
    log.info("Exported %d trade(s) to %s", len(trades), path)
    return path


def _date_key(value: Any) -> str:
    return format_trade_date(value)


def _lot_key(value: Any) -> str:
    number = as_float(value)
    if number is None:
        return "" if value is None else str(value).strip()
    return format_lot(number)


def row_key(row: Sequence[Any], columns: ColumnMap) -> str | None:
    """``date|entry|lot`` for an existing row, or ``None`` without date/entry."""
    when = _date_key(cell(row, columns.date))
    entry = cell_text(row, columns.entry)
    if not when or not entry:
        return None
    return f"{when}|{entry}|{_lot_key(cell(row, columns.lot_size))}"


def append_to_workbook(trades: Sequence[Trade], source: Path, out_dir: Path) -> AppendResult:
    """
    Merge *trades* into the first sheet of an existing workbook.

    Rows are matched on ``date|entry|lot``; only trades whose key is not
    already present are appended. A ``Trade #`` column is inserted when
    missing and every row is renumbered. The merged sheet is written to
    ``JOURNAL_FILENAME`` in *out_dir*.
    """
    if not trades:
        raise SpreadsheetError("No trades to upload. Please add trades first.")

    sheet_name, rows = read_first_sheet(source)
    if not rows:
        raise SpreadsheetError("The Excel file appears to be empty.")

    header = list(rows[0])
    data = [list(r) for r in rows[1:]]
    columns = ColumnMap.from_headers(header)
    if not columns.has_required:
        raise SpreadsheetError(columns.missing_required_message())

    seen = {key for key in (row_key(r, columns) for r in data) if key is not None}

    if columns.trade_number is None:
        header.insert(0, "Trade #")
        for r in data:
            r.insert(0, None)
        columns = ColumnMap.from_headers(header)

    new_trades = []
    for trade in trades:
        if not trade.date.strip() or not trade.entry.strip():
            continue
        key = trade.dedup_key
        if key in seen:
            continue
        seen.add(key)
        new_trades.append(trade)

    if not new_trades:
        raise SpreadsheetError("No new trades to add. All trades already exist in the Excel file.")

    width = len(header)
    for trade in new_trades:
        row: list[Any] = [None] * width
        for index, value in (
            (columns.date, trade.date.strip()),
            (columns.session, trade.session.value),
            (columns.entry, trade.entry.strip()),
            (columns.lot_size, trade.lot_size),
            (columns.outcome, trade.outcome.value),
            (columns.risk, trade.risk_dollars),
            (columns.reward, trade.reward_dollars),
            (columns.result, trade.result_dollars),
            (columns.equity, trade.equity_after),
            (columns.notes, trade.notes.strip()),
        ):
            if index is not None:
                row[index] = value
        data.append(row)

    tn = columns.trade_number
    for number, r in enumerate(data, start=1):
        if len(r) <= tn:
            r.extend([None] * (tn + 1 - len(r)))
        r[tn] = number

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name or SHEET_NAME
    ws.append(header)
    for r in data:
        ws.append(r)

    formats = {tn: INTEGER_FORMAT}
    if columns.lot_size is not None:
        formats[columns.lot_size] = LOT_FORMAT
    for index in (columns.risk, columns.reward, columns.result, columns.equity):
        if index is not None:
            formats[index] = MONEY_FORMAT
    apply_column_formats(ws, first_row=2, formats=formats)
    finish_sheet(ws, COLUMN_WIDTHS)

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / JOURNAL_FILENAME
    wb.save(path)
    log.info("Appended %d new trade(s) to %s (%d rows total)", len(new_trades), path, len(data))
    return AppendResult(path=path, added=len(new_trades), total_rows=len(data))


def _row_outcome(row: Sequence[Any], columns: ColumnMap) -> Outcome:
    outcome = Outcome.parse(cell_text(row, columns.outcome)) if columns.outcome is not None else None
    if outcome is not None:
        return outcome
    result = as_float(cell(row, columns.result))
    if result is not None:
        return Outcome.WIN if result >= 0 else Outcome.LOSS
    return Outcome.WIN


def read_trades(
    source: Path,
    settings: Settings,
    existing: Sequence[Trade] = (),
) -> ImportResult:
    """
    Read trades from the first sheet of *source*.

    Rows without a date or entry are skipped. Each imported row gets a
    provisional equity chain continuing from *existing* (floored at zero);
    callers are expected to run a full recalculation afterwards, which
    replaces every financial field.

    Raises:
        SpreadsheetError: unreadable file, missing Date/Entry columns, no
            valid rows, or the ledger is already at ``MAX_TRADES``
    """
    _sheet_name, rows = read_first_sheet(source)
    if len(rows) < 2:
        raise SpreadsheetError(
            "The Excel file appears to be empty or invalid. "
            "Please ensure it has at least a header row and one data row."
        )

    columns = ColumnMap.from_headers(rows[0])
    if not columns.has_required:
        raise SpreadsheetError(columns.missing_required_message())

    equity = as_number(settings.account_balance)
    if existing:
        last = as_number(existing[-1].equity_after)
        if last > 0:
            equity = last

    imported: list[Trade] = []
    skipped = 0
    for row in rows[1:]:
        when = format_trade_date(cell(row, columns.date))
        entry = cell_text(row, columns.entry)
        if not when or not entry:
            skipped += 1
            continue

        lot = as_float(cell(row, columns.lot_size))
        lot = lot if lot is not None and lot >= 0 else 0.0
        outcome = _row_outcome(row, columns)

        risk = risk_dollars(equity=equity, risk_percent=settings.risk_percent)
        reward = reward_dollars(lot_size=lot, take_profit_pips=settings.take_profit_pips)
        result = reward if outcome is Outcome.WIN else -risk
        after = max(0.0, equity + result)

        imported.append(
            Trade(
                id=new_trade_id(),
                date=when,
                session=Session.parse(cell_text(row, columns.session)),
                entry=entry,
                lot_size=lot,
                outcome=outcome,
                notes=cell_text(row, columns.notes),
                risk_dollars=round(risk, 2),
                reward_dollars=round(reward, 2),
                result_dollars=round(result, 2),
                equity_after=round(after, 2),
            )
        )
        if after > 0:
            equity = after

    if not imported:
        raise SpreadsheetError(
            "No valid trades found in the Excel file.\n\n"
            f"Skipped {skipped} invalid/empty row(s). Please ensure rows have Date and Entry values."
        )

    allowed = MAX_TRADES - len(existing)
    if allowed <= 0:
        raise SpreadsheetError(
            f"Maximum trade limit ({MAX_TRADES}) reached. Please delete some trades before importing."
        )
    truncated = max(0, len(imported) - allowed)
    if truncated:
        log.warning("Import truncated at %d trades; %d row(s) dropped", MAX_TRADES, truncated)
        imported = imported[:allowed]

    unparsed = sum(1 for t in imported if parse_trade_date(t.date) is None)
    if unparsed:
        log.info("%d imported trade(s) have dates that could not be parsed", unparsed)

    return ImportResult(trades=imported, skipped_rows=skipped, truncated=truncated)
