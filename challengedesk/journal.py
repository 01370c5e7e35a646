"""
The challenge journal: owned settings and ledger plus every mutation.

All state changes go through :class:`ChallengeJournal`. Each mutation
replaces the settings and/or ledger, runs the recalculation engine over the
affected suffix and persists both slots.
"""

import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Optional

from challengedesk.engine import Recalculation, recalculate
from challengedesk.equity import EquityCurve
from challengedesk.metrics import Metrics, compute_metrics
from challengedesk.risk import LotSizeSuggestion, as_number, suggest_lot_size
from challengedesk.settings import (
    CHALLENGE_ACCOUNTS,
    NUMERIC_LIMITS,
    RECALCULATING_FIELDS,
    RISK_PRESETS,
    Settings,
    coerce_setting_value,
    default_phase_targets,
    detect_risk_preset,
)
from challengedesk.spreadsheet import (
    MAX_TRADES,
    AppendResult,
    ImportResult,
    SpreadsheetError,
    append_to_workbook,
    export_canonical_workbook,
    export_workbook,
    read_canonical_workbook,
    read_trades,
    write_csv,
)
from challengedesk.storage import JournalStorage, MemoryStore
from challengedesk.trade import EDITABLE_FIELDS, NON_FINANCIAL_FIELDS, Trade, TradeDraft
from challengedesk.types import ChallengeType, Outcome, Session

log = logging.getLogger(__name__)


__all__ = ["ChallengeJournal"]


_SETTING_ALIASES = {
    "accountBalance": "account_balance",
    "riskPercent": "risk_percent",
    "stopLossPips": "stop_loss_pips",
    "takeProfitPips": "take_profit_pips",
    "phase1Target": "phase1_target",
    "phase2Target": "phase2_target",
    "dailyDrawdownLimit": "daily_drawdown_limit",
    "masterAccountBalance": "master_account_balance",
    "monthlyTarget": "monthly_target",
}


class ChallengeJournal:
    """
    Owns the challenge settings and the trade ledger.

    Example:
        journal = ChallengeJournal.load(JournalStorage(JsonFileStore(home)))
        journal.add_trade(TradeDraft.for_today(lot_size="0.25"))
        print(journal.metrics().display())

    Attributes:
        storage_warning: message from the last failed save, or ``None``
        last_recalculation: result of the most recent engine pass
    """

    def __init__(
        self,
        storage: Optional[JournalStorage] = None,
        settings: Optional[Settings] = None,
        trades: Optional[list[Trade]] = None,
    ):
        self.storage = storage or JournalStorage(MemoryStore())
        self._settings = settings or Settings()
        self._trades: list[Trade] = list(trades or [])
        self.storage_warning: Optional[str] = None
        self.last_recalculation: Optional[Recalculation] = None

    @classmethod
    def load(cls, storage: JournalStorage) -> "ChallengeJournal":
        """Restore a journal from *storage*; corrupt slots fall back to defaults."""
        journal = cls(storage, storage.load_settings(), storage.load_trades())
        log.info(
            "Loaded journal: %d trade(s), %s challenge",
            len(journal._trades),
            journal._settings.challenge_type.value,
        )
        return journal

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def trades(self) -> list[Trade]:
        return list(self._trades)

    def find_trade(self, trade_id: str) -> Optional[int]:
        for index, t in enumerate(self._trades):
            if t.id == trade_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Ledger mutations
    # ------------------------------------------------------------------

    def add_trade(self, draft: TradeDraft) -> Trade:
        """
        Validate *draft* and append it to the ledger.

        Raises:
            TradeValidationError: entry, date or lot size missing; nothing
                is applied
        """
        trade = draft.validate()
        self._trades.append(trade)
        self._recalculate(start=len(self._trades) - 1)
        self._save()
        added = self._trades[-1]
        log.info("Added trade %s %s %s", added.date, added.entry, added.outcome.value)
        return added

    def update_trade(self, trade_id: str, field: str, value: Any) -> bool:
        """
        Edit one field of a trade.

        ``entry`` and ``notes`` are written through; every other field
        recalculates the ledger from the edited trade onwards. Returns
        ``False`` for an unknown trade, field or unusable value.
        """
        index = self.find_trade(trade_id)
        if index is None or field not in EDITABLE_FIELDS:
            log.debug("Rejected edit %s=%r on trade %s", field, value, trade_id)
            return False

        coerced = self._coerce_trade_field(field, value)
        if coerced is None:
            log.debug("Rejected edit %s=%r on trade %s", field, value, trade_id)
            return False

        self._trades[index] = self._trades[index].with_fields(**{field: coerced})
        if field not in NON_FINANCIAL_FIELDS:
            self._recalculate(start=index)
        self._save()
        return True

    def delete_trade(self, trade_id: str) -> bool:
        index = self.find_trade(trade_id)
        if index is None:
            return False

        removed = self._trades.pop(index)
        if not self._trades and self._settings.is_zero_step:
            self._settings = self._settings.updated(
                master_account_balance=self._settings.account_balance
            )
        self._recalculate(start=0)
        self._save()
        log.info("Deleted trade %s (%s %s)", removed.id, removed.date, removed.entry)
        return True

    @staticmethod
    def _coerce_trade_field(field: str, value: Any) -> Any:
        if field in ("date", "entry"):
            text = str(value if value is not None else "").strip()
            return text or None
        if field == "notes":
            return str(value if value is not None else "")
        if field == "session":
            text = str(value if value is not None else "").strip()
            for session in Session:
                if session.value.lower() == text.lower():
                    return session
            return None
        if field == "outcome":
            return Outcome.parse(value)
        if field == "lot_size":
            text = str(value if value is not None else "").strip()
            if not text:
                return None
            number = as_number(text, default=-1.0)
            return number if number >= 0 else None
        return None

    # ------------------------------------------------------------------
    # Settings mutations
    # ------------------------------------------------------------------

    def set_setting(self, key: str, value: Any) -> bool:
        """
        Change one numeric setting.

        Empty, non-numeric, negative and out-of-range values are rejected
        (``False``) and leave the journal unchanged. Account size, risk and
        pip changes recalculate the whole ledger.
        """
        key = _SETTING_ALIASES.get(key, key)
        if key not in NUMERIC_LIMITS:
            log.debug("Unknown setting %r", key)
            return False

        number = coerce_setting_value(key, value)
        if number is None:
            log.debug("Rejected setting %s=%r", key, value)
            return False

        changes: dict[str, Any] = {key: number}
        if key == "risk_percent":
            changes["risk_preset"] = detect_risk_preset(number)
        self._settings = self._settings.updated(**changes)

        if key in RECALCULATING_FIELDS:
            self._recalculate(start=0)
        self._save()
        return True

    def apply_risk_preset(self, name: str) -> bool:
        """Switch to a named risk preset (``safe``, ``balanced``, ``aggressive``)."""
        risk = RISK_PRESETS.get(name)
        if risk is None:
            return False
        self._settings = self._settings.updated(risk_percent=risk, risk_preset=name)
        self._recalculate(start=0)
        self._save()
        return True

    def select_challenge_account(self, amount: float) -> bool:
        """Pick a challenge size; sets both the challenge and master balances."""
        balance = as_number(amount)
        if balance not in CHALLENGE_ACCOUNTS:
            return False
        self._settings = self._settings.updated(
            account_balance=balance, master_account_balance=balance
        )
        self._recalculate(start=0)
        self._save()
        return True

    def change_challenge_type(self, challenge_type: ChallengeType | str) -> None:
        """Switch challenge topology and reset the phase targets to its defaults.

        The ledger is not recalculated.
        """
        kind = ChallengeType.parse(challenge_type)
        p1, p2 = default_phase_targets(kind)
        self._settings = self._settings.updated(
            challenge_type=kind, phase1_target=p1, phase2_target=p2
        )
        self._save()

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def suggested_lot(self) -> LotSizeSuggestion:
        equity = as_number(self._settings.account_balance)
        for t in reversed(self._trades):
            value = as_number(t.equity_after, default=math.nan)
            if not math.isnan(value):
                equity = value
                break
        return suggest_lot_size(
            current_equity=equity,
            risk_percent=self._settings.risk_percent,
            stop_loss_pips=self._settings.stop_loss_pips,
        )

    def new_draft(self, today: Optional[date] = None) -> TradeDraft:
        """Blank add-trade form with the suggested lot size filled in."""
        return TradeDraft.for_today(self.suggested_lot().lot_size, today)

    def metrics(self, today: Optional[date] = None) -> Metrics:
        return compute_metrics(self._settings, self._trades, today)

    def equity_curve(self) -> EquityCurve:
        return EquityCurve.from_ledger(self._settings, self._trades)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def export_xlsx(self, out_dir: Path) -> Path:
        return export_workbook(self._trades, Path(out_dir))

    def append_xlsx(self, source: Path, out_dir: Path) -> AppendResult:
        return append_to_workbook(self._trades, Path(source), Path(out_dir))

    def import_xlsx(self, source: Path) -> ImportResult:
        """
        Append trades read from a workbook, then recalculate the whole ledger.

        Raises:
            SpreadsheetError: the file was rejected; the journal is unchanged
        """
        result = read_trades(Path(source), self._settings, self._trades)
        self._trades.extend(result.trades)
        self._recalculate(start=0)
        self._save()
        log.info(
            "Imported %d trade(s) from %s (%d row(s) skipped)",
            len(result.trades),
            Path(source).name,
            result.skipped_rows,
        )
        return result

    def export_csv(self, out_dir: Path, today: Optional[date] = None) -> Path:
        return write_csv(self._trades, Path(out_dir), today)

    def export_canonical(self, path: Path) -> Path:
        return export_canonical_workbook(self._trades, self._settings, Path(path))

    def import_canonical(self, path: Path) -> int:
        """
        Append trades from a canonical six-sheet workbook.

        Returns the number of trades added.

        Raises:
            SpreadsheetError: wrong layout, no data rows, or the ledger is full
        """
        imported = read_canonical_workbook(Path(path))
        if not imported:
            raise SpreadsheetError("No valid trades found in Trade_Journal.")

        allowed = MAX_TRADES - len(self._trades)
        if allowed <= 0:
            raise SpreadsheetError(
                f"Maximum trade limit ({MAX_TRADES}) reached. Please delete some trades before importing."
            )
        if len(imported) > allowed:
            log.warning("Import truncated at %d trades; %d row(s) dropped", MAX_TRADES, len(imported) - allowed)
            imported = imported[:allowed]

        self._trades.extend(imported)
        self._recalculate(start=0)
        self._save()
        return len(imported)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _recalculate(self, start: int) -> Recalculation:
        result = recalculate(self._settings, self._trades, start)
        self.last_recalculation = result
        if result.ok:
            self._trades = list(result.trades)
            if result.master_account_balance is not None:
                self._settings = self._settings.updated(
                    master_account_balance=result.master_account_balance
                )
        return result

    def _save(self) -> None:
        warnings = [
            self.storage.save_settings(self._settings),
            self.storage.save_trades(self._trades),
        ]
        self.storage_warning = next((w for w in warnings if w is not None), None)
