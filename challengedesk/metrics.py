"""Dashboard metrics projected from settings and the trade ledger."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from challengedesk.phase import PhaseStatus, clamp_percent, resolve_phase
from challengedesk.risk import as_number, risk_dollars, suggested_lot_size
from challengedesk.settings import Settings
from challengedesk.time_utils import parse_trade_date, today as local_today
from challengedesk.trade import Trade
from challengedesk.types import Outcome, Phase

log = logging.getLogger(__name__)


__all__ = [
    "DrawdownStatus",
    "Metrics",
    "MonthlyProgress",
    "compute_metrics",
    "current_equity",
    "daily_drawdown",
    "expectancy",
    "monthly_progress",
    "strategy_grade",
]


@dataclass(frozen=True)
class DrawdownStatus:
    drawdown: float      # percent of the start-of-day equity, [0, 100]
    warning: bool


@dataclass(frozen=True)
class MonthlyProgress:
    progress: float      # [0, 100]
    target: float
    starting_balance: float


@dataclass(frozen=True)
class Metrics:
    """Snapshot of everything the dashboard shows. Never persisted."""
    total_trades: int
    wins: int
    losses: int
    win_rate: float
    current_equity: float
    expectancy: float
    strategy_grade: str
    suggested_lot_size: str
    phase: PhaseStatus
    daily_drawdown: float
    drawdown_warning: bool
    monthly_target_progress: float
    monthly_target_amount: float
    monthly_starting_balance: float

    @property
    def current_phase(self) -> Phase:
        return self.phase.phase

    @classmethod
    def zeroed(cls, settings: Settings) -> "Metrics":
        """Safe snapshot shown when the projection itself fails."""
        balance = as_number(settings.account_balance)
        return cls(
            total_trades=0,
            wins=0,
            losses=0,
            win_rate=0.0,
            current_equity=balance,
            expectancy=0.0,
            strategy_grade="C",
            suggested_lot_size="0.00",
            phase=PhaseStatus(Phase.PHASE1, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, balance),
            daily_drawdown=0.0,
            drawdown_warning=False,
            monthly_target_progress=0.0,
            monthly_target_amount=0.0,
            monthly_starting_balance=0.0,
        )

    def display(self) -> dict[str, Any]:
        """Formatted values: money and percentages as 2 decimal strings."""
        return {
            "totalTrades": self.total_trades,
            "wins": self.wins,
            "losses": self.losses,
            "winRate": f"{self.win_rate:.2f}",
            "currentEquity": f"{self.current_equity:.2f}",
            "expectancy": f"{self.expectancy:.2f}",
            "strategyGrade": self.strategy_grade,
            "suggestedLotSize": self.suggested_lot_size,
            "currentPhase": self.phase.phase.value,
            "phaseProgress": f"{self.phase.progress:.2f}",
            "phase1Progress": f"{self.phase.phase1_progress:.2f}",
            "phase2Progress": f"{self.phase.phase2_progress:.2f}",
            "phaseTarget": f"{self.phase.phase_target:.2f}",
            "phase1Target": f"{self.phase.phase1_target:.2f}",
            "phase2Target": f"{self.phase.phase2_target:.2f}",
            "dailyDrawdown": f"{self.daily_drawdown:.2f}",
            "drawdownWarning": self.drawdown_warning,
            "monthlyTargetProgress": f"{self.monthly_target_progress:.2f}",
            "monthlyTargetAmount": f"{self.monthly_target_amount:.2f}",
            "monthlyStartingBalance": f"{self.monthly_starting_balance:.2f}",
        }


def current_equity(settings: Settings, trades: Sequence[Trade]) -> float:
    """Last trade's equity, or the account balance for an empty ledger."""
    if trades:
        return as_number(trades[-1].equity_after, as_number(settings.account_balance))
    return as_number(settings.account_balance)


def expectancy(*, win_rate: float, avg_win_pips: float, avg_loss_pips: float) -> float:
    """Expected pips per trade; *win_rate* is a percentage."""
    p = as_number(win_rate) / 100.0
    return p * as_number(avg_win_pips) - (1.0 - p) * as_number(avg_loss_pips)


def strategy_grade(expectancy_pips: float) -> str:
    if expectancy_pips > 1:
        return "A"
    if expectancy_pips >= 0:
        return "B"
    return "C"


def daily_drawdown(
    settings: Settings, trades: Sequence[Trade], *, on: date, equity: float
) -> DrawdownStatus:
    """
    Intraday drawdown for trades dated *on*.

    The baseline is the equity after the last trade not dated *on* (or
    *equity* when there is none). Today's trades are replayed from it and the
    lowest point reached is compared against the baseline.
    """
    todays = [t for t in trades if parse_trade_date(t.date) == on]
    dd = 0.0
    if todays:
        earlier = [t for t in trades if parse_trade_date(t.date) != on]
        baseline = as_number(earlier[-1].equity_after, equity) if earlier else equity

        running = low = baseline
        for t in todays:
            if t.outcome is Outcome.WIN:
                running += as_number(t.reward_dollars)
            else:
                running -= as_number(t.risk_dollars)
            low = min(low, running)

        if baseline > 0:
            dd = clamp_percent((baseline - low) / baseline * 100.0)

    return DrawdownStatus(
        drawdown=dd,
        warning=dd >= as_number(settings.daily_drawdown_limit),
    )


def monthly_progress(
    settings: Settings,
    trades: Sequence[Trade],
    *,
    on: date,
    equity: float,
    in_master: bool,
) -> MonthlyProgress:
    """
    Progress towards the monthly profit target once funded.

    The month's baseline is the equity just before the first master-phase
    trade dated in *on*'s month, falling back to the master account balance.
    """
    if not (in_master or settings.is_zero_step):
        return MonthlyProgress(progress=0.0, target=0.0, starting_balance=0.0)
    target = as_number(settings.monthly_target)
    if target <= 0:
        return MonthlyProgress(progress=0.0, target=0.0, starting_balance=0.0)

    master_balance = as_number(settings.master_account_balance)
    baseline = master_balance
    for index, t in enumerate(trades):
        when = parse_trade_date(t.date)
        if when is None or (when.year, when.month) != (on.year, on.month):
            continue
        if not (t.is_master_phase or settings.is_zero_step):
            continue
        if index > 0:
            baseline = as_number(trades[index - 1].equity_after) or master_balance
        break

    progress = clamp_percent((equity - baseline) / target * 100.0)
    return MonthlyProgress(progress=progress, target=target, starting_balance=baseline)


def compute_metrics(settings: Settings, trades: Sequence[Trade], today: date | None = None) -> Metrics:
    """
    Project dashboard metrics from *settings* and *trades*.

    Args:
        settings: Current challenge settings
        trades: Recalculated ledger, oldest first
        today: Calendar day for the daily/monthly figures (default: local today)

    Returns:
        Metrics snapshot; :meth:`Metrics.zeroed` if anything goes wrong
    """
    try:
        on = today or local_today()
        total = len(trades)
        wins = sum(1 for t in trades if t.outcome is Outcome.WIN)
        losses = sum(1 for t in trades if t.outcome is Outcome.LOSS)
        win_rate = (wins / total * 100.0) if total else 0.0

        equity = current_equity(settings, trades)

        # Trades carry no pip distances of their own, so the averages are
        # always the configured TP/SL.
        exp = expectancy(
            win_rate=win_rate,
            avg_win_pips=settings.take_profit_pips,
            avg_loss_pips=settings.stop_loss_pips,
        )

        risk = risk_dollars(equity=equity, risk_percent=settings.risk_percent)
        lot = suggested_lot_size(risk=risk, stop_loss_pips=settings.stop_loss_pips)

        phase = resolve_phase(settings, equity)
        if trades and trades[-1].is_master_phase and not phase.is_master:
            # Once funded, a dip below the challenge targets does not demote.
            phase = PhaseStatus(
                phase=Phase.MASTER,
                progress=100.0,
                phase_target=phase.phase2_target or phase.phase1_target,
                phase1_target=phase.phase1_target,
                phase2_target=phase.phase2_target,
                phase1_progress=phase.phase1_progress,
                phase2_progress=phase.phase2_progress,
                starting_balance=as_number(settings.master_account_balance),
            )

        dd = daily_drawdown(settings, trades, on=on, equity=equity)
        monthly = monthly_progress(settings, trades, on=on, equity=equity, in_master=phase.is_master)

        return Metrics(
            total_trades=total,
            wins=wins,
            losses=losses,
            win_rate=clamp_percent(win_rate),
            current_equity=equity,
            expectancy=exp,
            strategy_grade=strategy_grade(exp),
            suggested_lot_size=lot,
            phase=phase,
            daily_drawdown=dd.drawdown,
            drawdown_warning=dd.warning,
            monthly_target_progress=monthly.progress,
            monthly_target_amount=monthly.target,
            monthly_starting_balance=monthly.starting_balance,
        )
    except Exception:
        log.exception("Error calculating metrics")
        return Metrics.zeroed(settings)
