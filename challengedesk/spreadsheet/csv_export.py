import csv
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence

from challengedesk.time_utils import today as _today
from challengedesk.trade import Trade

log = logging.getLogger(__name__)


CSV_HEADERS = [
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


def csv_filename(on: date) -> str:
    return f"fundingpips-trades-{on.isoformat()}.csv"


def _text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def write_csv(trades: Sequence[Trade], out_dir: Path, today: Optional[date] = None) -> Path:
    """Write the ledger as CSV.

    The header row is plain; every data value is quoted, with embedded quotes
    doubled. Lines end with ``\\n``.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / csv_filename(today or _today())
    with path.open("w", newline="", encoding="utf-8") as f:
        csv.writer(f, lineterminator="\n").writerow(CSV_HEADERS)
        w = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for t in trades:
            w.writerow(
                [
                    t.date,
                    t.session.value,
                    t.entry,
                    _text(t.lot_size),
                    t.outcome.value,
                    _text(t.risk_dollars),
                    _text(t.reward_dollars),
                    _text(t.result_dollars),
                    _text(t.equity_after),
                    t.notes,
                ]
            )
    log.info("Exported %d trade(s) to %s", len(trades), path)
    return path
