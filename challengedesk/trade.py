"""Trade records and add-trade input validation."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Mapping

from challengedesk.catalog import DEFAULT_ENTRY
from challengedesk.risk import as_number
from challengedesk.types import Outcome, Session

log = logging.getLogger(__name__)


__all__ = [
    "EDITABLE_FIELDS",
    "NON_FINANCIAL_FIELDS",
    "Trade",
    "TradeDraft",
    "TradeValidationError",
    "format_lot",
    "new_trade_id",
]


VALIDATION_MESSAGE = "Please fill in Entry, Lot Size, and Date before adding a trade."

EDITABLE_FIELDS = frozenset({"date", "session", "entry", "lot_size", "outcome", "notes"})

# Edits to these are written through without recalculation.
NON_FINANCIAL_FIELDS = frozenset({"entry", "notes"})

_CAMEL_KEYS = {
    "lotSize": "lot_size",
    "riskDollars": "risk_dollars",
    "rewardDollars": "reward_dollars",
    "resultDollars": "result_dollars",
    "equityAfter": "equity_after",
    "isMasterPhase": "is_master_phase",
}


class TradeValidationError(ValueError):
    """Raised when add-trade input is incomplete; nothing is applied."""


def _as_flag(value: Any) -> bool:
    """Stored flag; of the strings only "true", "1" and "yes" count as set."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def new_trade_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Trade:
    """A journal entry.

    The ``*_dollars``, ``equity_after`` and ``is_master_phase`` fields are
    derived by the recalculation engine and stored rounded to cents.
    """

    id: str
    date: str
    session: Session
    entry: str
    lot_size: float
    outcome: Outcome
    notes: str = ""
    risk_dollars: float = 0.0
    reward_dollars: float = 0.0
    result_dollars: float = 0.0
    equity_after: float = 0.0
    is_master_phase: bool = False

    @property
    def is_win(self) -> bool:
        return self.outcome is Outcome.WIN

    @property
    def dedup_key(self) -> str:
        """``date|entry|lot`` key used when appending to an existing workbook."""
        return f"{self.date.strip()}|{self.entry.strip()}|{format_lot(self.lot_size)}"

    def with_fields(self, **changes: Any) -> Trade:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "session": self.session.value,
            "entry": self.entry,
            "lot_size": self.lot_size,
            "outcome": self.outcome.value,
            "notes": self.notes,
            "risk_dollars": self.risk_dollars,
            "reward_dollars": self.reward_dollars,
            "result_dollars": self.result_dollars,
            "equity_after": self.equity_after,
            "is_master_phase": self.is_master_phase,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Trade:
        """
        Rebuild a trade from persisted data, coercing each field.

        Non-numeric amounts become 0, an unrecognised outcome is treated as a
        loss and a missing id is regenerated. Derived fields are trusted only
        until the next recalculation.
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"trade must be a mapping, got {type(raw).__name__}")

        data = {_CAMEL_KEYS.get(k, k): v for k, v in raw.items()}
        outcome = Outcome.parse(data.get("outcome"))
        if outcome is None:
            log.debug("Unknown outcome %r treated as Loss", data.get("outcome"))
            outcome = Outcome.LOSS

        raw_id = data.get("id")
        return cls(
            id=str(raw_id) if raw_id not in (None, "") else new_trade_id(),
            date=str(data.get("date") or "").strip(),
            session=Session.parse(data.get("session")),
            entry=str(data.get("entry") or "").strip(),
            lot_size=max(0.0, as_number(data.get("lot_size"))),
            outcome=outcome,
            notes=str(data.get("notes") or ""),
            risk_dollars=as_number(data.get("risk_dollars")),
            reward_dollars=as_number(data.get("reward_dollars")),
            result_dollars=as_number(data.get("result_dollars")),
            equity_after=as_number(data.get("equity_after")),
            is_master_phase=_as_flag(data.get("is_master_phase")),
        )


def format_lot(lot_size: float) -> str:
    """Canonical text for a lot size ("0.03", "1", "0.125")."""
    return f"{round(as_number(lot_size), 8):g}"


@dataclass(frozen=True)
class TradeDraft:
    """Raw add-trade form values, before validation."""
    date: str = ""
    session: str = Session.LONDON.value
    entry: str = DEFAULT_ENTRY
    lot_size: str | float = ""
    outcome: str = Outcome.WIN.value
    notes: str = ""

    @classmethod
    def for_today(cls, lot_size: str | float = "", today: date | None = None) -> TradeDraft:
        """A blank form dated *today*, pre-filled with *lot_size*."""
        return cls(date=(today or date.today()).isoformat(), lot_size=lot_size)

    def validate(self) -> Trade:
        """
        Convert to a :class:`Trade` with zeroed derived fields.

        Raises:
            TradeValidationError: entry or date is blank, or lot size is not
                a positive number
        """
        entry = str(self.entry or "").strip()
        when = str(self.date or "").strip()
        lot = as_number(self.lot_size) if str(self.lot_size).strip() else 0.0
        if not entry or not when or lot <= 0:
            raise TradeValidationError(VALIDATION_MESSAGE)

        return Trade(
            id=new_trade_id(),
            date=when,
            session=Session.parse(self.session),
            entry=entry,
            lot_size=lot,
            outcome=Outcome.parse(self.outcome) or Outcome.WIN,
            notes=str(self.notes or ""),
        )
