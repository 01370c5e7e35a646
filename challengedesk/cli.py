"""CLI entry point: challengedesk summary|add|edit|delete|set|... ."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .catalog import DEFAULT_ENTRY, is_catalogued, suggest_entries, suggest_notes
from .config import AppConfig
from .journal import ChallengeJournal
from .settings import CHALLENGE_ACCOUNTS, NUMERIC_LIMITS, RISK_PRESETS
from .storage import JournalStorage, JsonFileStore
from .time_utils import today
from .trade import EDITABLE_FIELDS, TradeDraft
from .types import ChallengeType, Outcome, Session

log = logging.getLogger(__name__)


__all__ = [
    "configure_logging",
    "main",
]


def configure_logging(level: str = "INFO", force: bool = False) -> None:
    """
    Configure root logger with console output.

    By default, this is non-destructive: if the root logger already has handlers,
    it will do nothing (assuming the application has configured logging).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        force: If True, clear existing handlers and force this configuration
    """
    root_logger = logging.getLogger()

    if root_logger.hasHandlers() and not force:
        return

    root_logger.setLevel(level.upper())

    if force:
        root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def _open_journal(args: argparse.Namespace) -> ChallengeJournal:
    return ChallengeJournal.load(JournalStorage(JsonFileStore(args.home)))


def _out_dir(args: argparse.Namespace) -> Path:
    return Path(args.out) if args.out else args.export_dir


def _report_storage(journal: ChallengeJournal) -> None:
    if journal.storage_warning:
        print(f"warning: {journal.storage_warning}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_summary(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    metrics = journal.metrics()

    if args.json:
        payload = {
            "settings": journal.settings.to_dict(),
            "metrics": metrics.display(),
            "trades": [t.to_dict() for t in journal.trades],
        }
        print(json.dumps(payload, indent=2))
        return 0

    s = journal.settings
    shown = metrics.display()
    print(f"Challenge:      {s.challenge_type.value} (${s.account_balance:,.2f})")
    print(f"Risk:           {s.risk_percent:g}% ({s.risk_preset}), SL {s.stop_loss_pips:g} / TP {s.take_profit_pips:g} pips")
    print(f"Phase:          {metrics.current_phase.label} ({shown['phaseProgress']}%)")
    print(f"Equity:         ${metrics.current_equity:,.2f}")
    print(f"Trades:         {metrics.total_trades} ({metrics.wins}W / {metrics.losses}L, {shown['winRate']}%)")
    print(f"Expectancy:     {shown['expectancy']} pips (grade {metrics.strategy_grade})")
    print(f"Daily drawdown: {shown['dailyDrawdown']}%{'  WARNING' if metrics.drawdown_warning else ''}")
    if metrics.phase.is_master and s.monthly_target > 0:
        print(f"Monthly target: {shown['monthlyTargetProgress']}% of ${s.monthly_target:,.2f}")
    print(f"Suggested lot:  {metrics.suggested_lot_size}")

    if args.trades and journal.trades:
        print()
        for number, t in enumerate(journal.trades, start=1):
            marker = "M" if t.is_master_phase else " "
            print(
                f"{number:>4} {marker} {t.id[:8]}  {t.date:<10} {t.session.value:<8} {t.entry:<8} "
                f"{t.lot_size:>6g} {t.outcome.value:<4} {t.result_dollars:>10,.2f} {t.equity_after:>12,.2f}"
            )
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    draft = journal.new_draft()
    trade = journal.add_trade(
        TradeDraft(
            date=args.date or draft.date,
            session=args.session,
            entry=args.entry,
            lot_size=args.lot if args.lot is not None else draft.lot_size,
            outcome=args.outcome,
            notes=args.notes,
        )
    )
    if not is_catalogued(trade.entry):
        similar = suggest_entries(trade.entry, limit=3)
        hint = f"; similar: {', '.join(similar)}" if similar else ""
        print(f"note: {trade.entry} is not in the instrument list{hint}", file=sys.stderr)
    _report_storage(journal)
    print(f"Added {trade.id}: {trade.outcome.value} {trade.result_dollars:+,.2f} -> ${trade.equity_after:,.2f}")
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    if args.notes:
        matches = suggest_notes(args.query, limit=args.limit)
    else:
        matches = suggest_entries(args.query, limit=args.limit)
    for item in matches:
        print(item)
    return 0 if matches else 1


def _resolve_id(journal: ChallengeJournal, prefix: str) -> str | None:
    matches = [t.id for t in journal.trades if t.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


def cmd_edit(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    trade_id = _resolve_id(journal, args.trade_id)
    if trade_id is None or not journal.update_trade(trade_id, args.field, args.value):
        print(f"error: could not set {args.field}={args.value!r} on trade {args.trade_id}", file=sys.stderr)
        return 1
    _report_storage(journal)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    trade_id = _resolve_id(journal, args.trade_id)
    if trade_id is None or not journal.delete_trade(trade_id):
        print(f"error: no unique trade matches {args.trade_id!r}", file=sys.stderr)
        return 1
    _report_storage(journal)
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    if not journal.set_setting(args.key, args.value):
        lo, hi = NUMERIC_LIMITS.get(args.key, (None, None))
        hint = f" (allowed {lo:g}..{hi:g})" if lo is not None else ""
        print(f"error: rejected {args.key}={args.value!r}{hint}", file=sys.stderr)
        return 1
    _report_storage(journal)
    return 0


def cmd_preset(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    journal.apply_risk_preset(args.name)
    _report_storage(journal)
    return 0


def cmd_account(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    journal.select_challenge_account(args.amount)
    _report_storage(journal)
    return 0


def cmd_challenge(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    journal.change_challenge_type(args.type)
    _report_storage(journal)
    return 0


def cmd_export_xlsx(args: argparse.Namespace) -> int:
    path = _open_journal(args).export_xlsx(_out_dir(args))
    print(path)
    return 0


def cmd_append_xlsx(args: argparse.Namespace) -> int:
    result = _open_journal(args).append_xlsx(Path(args.source), _out_dir(args))
    print(f"Added {result.added} new trade(s); {result.total_rows} row(s) in {result.path}")
    return 0


def cmd_import_xlsx(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    result = journal.import_xlsx(Path(args.source))
    _report_storage(journal)
    print(f"Imported {len(result.trades)} trade(s), skipped {result.skipped_rows} row(s)")
    if result.truncated:
        print(f"{result.truncated} row(s) dropped at the trade limit")
    return 0


def cmd_export_csv(args: argparse.Namespace) -> int:
    path = _open_journal(args).export_csv(_out_dir(args), today())
    print(path)
    return 0


def cmd_export_canonical(args: argparse.Namespace) -> int:
    path = _open_journal(args).export_canonical(Path(args.path))
    print(path)
    return 0


def cmd_import_canonical(args: argparse.Namespace) -> int:
    journal = _open_journal(args)
    added = journal.import_canonical(Path(args.path))
    _report_storage(journal)
    print(f"Imported {added} trade(s)")
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="challengedesk",
        description="Prop-firm challenge trading journal",
    )
    parser.add_argument("--home", type=Path, default=None, help="Journal data directory")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("summary", help="Show dashboard metrics")
    p.add_argument("--json", action="store_true", help="Print settings, metrics and trades as JSON")
    p.add_argument("--trades", action="store_true", help="List trades")
    p.set_defaults(func=cmd_summary)

    p = sub.add_parser("add", help="Add a trade")
    p.add_argument("--date", default=None, help="Trade date (default: today)")
    p.add_argument("--session", default=Session.LONDON.value, choices=[s.value for s in Session])
    p.add_argument("--entry", default=DEFAULT_ENTRY, help="Instrument (see `suggest`)")
    p.add_argument("--lot", default=None, help="Lot size (default: suggested)")
    p.add_argument("--outcome", default=Outcome.WIN.value, choices=[o.value for o in Outcome])
    p.add_argument("--notes", default="")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("suggest", help="List catalogued instruments or quick notes")
    p.add_argument("query", nargs="?", default="", help="Text to match")
    p.add_argument("--notes", action="store_true", help="Search the quick notes instead of instruments")
    p.add_argument("--limit", type=int, default=10)
    p.set_defaults(func=cmd_suggest)

    p = sub.add_parser("edit", help="Change one field of a trade")
    p.add_argument("trade_id", help="Trade id or unique prefix")
    p.add_argument("field", choices=sorted(EDITABLE_FIELDS))
    p.add_argument("value")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("delete", help="Delete a trade")
    p.add_argument("trade_id", help="Trade id or unique prefix")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("set", help="Change a numeric setting")
    p.add_argument("key", choices=sorted(NUMERIC_LIMITS))
    p.add_argument("value")
    p.set_defaults(func=cmd_set)

    p = sub.add_parser("preset", help="Apply a risk preset")
    p.add_argument("name", choices=list(RISK_PRESETS))
    p.set_defaults(func=cmd_preset)

    p = sub.add_parser("account", help="Choose the challenge account size")
    p.add_argument("amount", type=int, choices=list(CHALLENGE_ACCOUNTS))
    p.set_defaults(func=cmd_account)

    p = sub.add_parser("challenge", help="Switch challenge type")
    p.add_argument("type", choices=[c.value for c in ChallengeType])
    p.set_defaults(func=cmd_challenge)

    p = sub.add_parser("export-xlsx", help="Write the journal workbook")
    p.add_argument("--out", default=None, help="Output directory")
    p.set_defaults(func=cmd_export_xlsx)

    p = sub.add_parser("append-xlsx", help="Add new trades to an existing workbook")
    p.add_argument("source", help="Existing .xlsx file")
    p.add_argument("--out", default=None, help="Output directory")
    p.set_defaults(func=cmd_append_xlsx)

    p = sub.add_parser("import-xlsx", help="Import trades from a workbook")
    p.add_argument("source", help=".xlsx file")
    p.set_defaults(func=cmd_import_xlsx)

    p = sub.add_parser("export-csv", help="Write the journal as CSV")
    p.add_argument("--out", default=None, help="Output directory")
    p.set_defaults(func=cmd_export_csv)

    p = sub.add_parser("export-canonical", help="Write the six-sheet journal workbook")
    p.add_argument("path", help="Destination .xlsx file")
    p.set_defaults(func=cmd_export_canonical)

    p = sub.add_parser("import-canonical", help="Import a six-sheet journal workbook")
    p.add_argument("path", help=".xlsx file")
    p.set_defaults(func=cmd_import_canonical)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AppConfig.from_env()
        configure_logging(args.log_level or config.log_level)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.home is None:
        args.home = config.data_dir
    args.export_dir = config.export_dir

    try:
        return args.func(args)
    except (ValueError, OSError) as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
