"""
The canonical six-sheet journal workbook.

Unlike the tolerant single-sheet import, re-importing this layout is strict:
the sheet list must match ``CANONICAL_SHEETS`` exactly and the journal sheet
is read by fixed column position.
"""

import logging
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook

from challengedesk.settings import Settings
from challengedesk.spreadsheet.columns import cell, cell_text
from challengedesk.spreadsheet.workbook import (
    LOT_FORMAT,
    MONEY_FORMAT,
    SpreadsheetError,
    apply_column_formats,
    as_float,
    finish_sheet,
    open_workbook,
    sheet_rows,
)
from challengedesk.time_utils import format_trade_date
from challengedesk.trade import Trade, new_trade_id
from challengedesk.types import Outcome, Session

log = logging.getLogger(__name__)


CANONICAL_SHEETS = (
    "Dashboard",
    "Trade_Journal",
    "Stats",
    "Progress",
    "READ ME",
    "1-PAGE GUIDE",
)

TRADE_COLUMNS = (
    "Date",
    "Session (IST)",
    "Pair",
    "Setup Type",
    "Direction",
    "Entry Price",
    "Stop Loss Price",
    "Take Profit Price",
    "Stop Loss (pips)",
    "Take Profit (pips)",
    "Lot Size",
    "Risk $",
    "Reward $",
    "Result $",
    "Outcome",
    "Rule Followed?",
    "Equity After Trade",
    "Notes",
)
_COL = {name: index for index, name in enumerate(TRADE_COLUMNS)}

JOURNAL_WIDTHS = [11, 13, 10, 16, 10, 11, 15, 17, 16, 17, 9, 12, 12, 12, 10, 14, 18, 40]

# Dates carrying either marker are instruction rows, not trades.
_SKIP_MARKERS = ("⚠️", "DO NOT EDIT")

_README_LINES = (
    "⚠️ READ ME FIRST – HOW TO USE THIS TRADING JOURNAL",
    "",
    "EDIT ONLY THESE COLUMNS IN Trade_Journal:",
    "Date, Session, Pair, Setup Type, Direction, Entry, SL, TP, SL pips, TP pips, Lot, Outcome, Rule Followed, Notes",
    "",
    "Risk $, Reward $, Result $ and Equity After Trade are recalculated on import.",
)


def _journal_row(trade: Trade, settings: Settings) -> list[Any]:
    return [
        trade.date,
        trade.session.value,
        trade.entry,
        "",
        "",
        "",
        "",
        "",
        settings.stop_loss_pips,
        settings.take_profit_pips,
        trade.lot_size,
        trade.risk_dollars,
        trade.reward_dollars,
        trade.result_dollars,
        trade.outcome.value,
        "",
        trade.equity_after,
        trade.notes,
    ]


def export_canonical_workbook(trades: Sequence[Trade], settings: Settings, path: Path) -> Path:
    """Write the six-sheet journal workbook to *path*."""
    balance = settings.account_balance
    wb = Workbook()

    dashboard = wb.active
    dashboard.title = "Dashboard"
    for row in (
        ["ACCOUNT DASHBOARD", ""],
        ["", ""],
        ["Starting Balance ($)", balance],
        ["Fixed SL (pips)", settings.stop_loss_pips],
        ["Default Risk % (editable)", settings.risk_percent / 100],
        ["", ""],
        [f"Phase1 Target ({settings.phase1_target:g}%)", balance * settings.phase1_target / 100],
        [f"Phase2 Target ({settings.phase2_target:g}%)", balance * settings.phase2_target / 100],
        ["", ""],
        [f"Daily Drawdown Limit ({settings.daily_drawdown_limit:g}%)", balance * settings.daily_drawdown_limit / 100],
        ["Challenge Type", settings.challenge_type.value],
        ["Master Account Balance ($)", settings.master_account_balance],
    ):
        dashboard.append(row)

    journal = wb.create_sheet("Trade_Journal")
    journal.append(list(TRADE_COLUMNS))
    for trade in trades:
        journal.append(_journal_row(trade, settings))
    money = {_COL[name]: MONEY_FORMAT for name in ("Risk $", "Reward $", "Result $", "Equity After Trade")}
    apply_column_formats(journal, first_row=2, formats={_COL["Lot Size"]: LOT_FORMAT, **money})
    finish_sheet(journal, JOURNAL_WIDTHS)

    wins = sum(1 for t in trades if t.is_win)
    stats = wb.create_sheet("Stats")
    for row in (
        ["Total Trades", len(trades)],
        ["Winning Trades", wins],
        ["Losing Trades", len(trades) - wins],
        ["Win Rate %", wins / len(trades) if trades else 0],
    ):
        stats.append(row)

    progress = wb.create_sheet("Progress")
    progress.append([f"Phase 1 Target ({settings.phase1_target:g}%)", balance * settings.phase1_target / 100])
    progress.append([f"Phase 2 Target ({settings.phase2_target:g}%)", balance * settings.phase2_target / 100])
    if trades:
        progress.append(["Current Equity", trades[-1].equity_after])

    readme = wb.create_sheet("READ ME")
    for line in _README_LINES:
        readme.append([line])

    guide = wb.create_sheet("1-PAGE GUIDE")
    guide.append(["XAUUSD TRADING JOURNAL – QUICK GUIDE"])
    guide.append([""])
    guide.append([f"PAIR: XAUUSD | SL: {settings.stop_loss_pips:g} pips | TP: {settings.take_profit_pips:g} pips"])

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    log.info("Exported canonical workbook with %d trade(s) to %s", len(trades), path)
    return path


def _validate_sheet_names(names: Sequence[str]) -> None:
    if len(names) != len(CANONICAL_SHEETS):
        raise SpreadsheetError(f"Expected {len(CANONICAL_SHEETS)} sheets, found {len(names)}")
    for position, (expected, found) in enumerate(zip(CANONICAL_SHEETS, names), start=1):
        if expected != found:
            raise SpreadsheetError(f'Sheet {position} must be "{expected}", found "{found}"')


def _row_to_trade(row: Sequence[Any]) -> Trade | None:
    when = format_trade_date(cell(row, _COL["Date"]))
    if not when or any(marker in when for marker in _SKIP_MARKERS):
        return None
    pair = cell_text(row, _COL["Pair"])
    if not pair:
        return None

    outcome = Outcome.parse(cell_text(row, _COL["Outcome"]))
    if outcome is None:
        result = as_float(cell(row, _COL["Result $"]))
        outcome = Outcome.LOSS if result is not None and result < 0 else Outcome.WIN

    lot = as_float(cell(row, _COL["Lot Size"]))
    return Trade(
        id=new_trade_id(),
        date=when,
        session=Session.parse(cell_text(row, _COL["Session (IST)"])),
        entry=pair,
        lot_size=lot if lot is not None and lot > 0 else 0.0,
        outcome=outcome,
        notes=cell_text(row, _COL["Notes"]),
    )


def read_canonical_workbook(path: Path) -> list[Trade]:
    """
    Read trades from a canonical workbook.

    Only date, session, pair, lot size, outcome and notes are taken; derived
    amounts are left at zero for the caller's recalculation.

    Raises:
        SpreadsheetError: wrong sheet list, or ``Trade_Journal`` has no data rows
    """
    wb = open_workbook(path)
    try:
        _validate_sheet_names(list(wb.sheetnames))
        rows = sheet_rows(wb["Trade_Journal"])
    finally:
        wb.close()

    if len(rows) < 2:
        raise SpreadsheetError("Trade_Journal sheet has no data rows")

    trades = []
    skipped = 0
    for row in rows[1:]:
        trade = _row_to_trade(row)
        if trade is None:
            skipped += 1
            continue
        trades.append(trade)

    if skipped:
        log.info("Skipped %d non-trade row(s) in %s", skipped, Path(path).name)
    return trades
