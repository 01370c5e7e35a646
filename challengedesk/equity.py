import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from challengedesk.risk import as_number
from challengedesk.settings import Settings
from challengedesk.trade import Trade

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityPoint:
    trade: int
    equity: float


class EquityCurve:
    """
    Equity after each trade, starting from the challenge's opening balance.

    Point 0 is the starting equity (the master account balance for zero-step
    challenges, the challenge balance otherwise); point ``i`` is the equity
    after trade ``i``. Provides numpy arrays for charting.

    Example:
        curve = EquityCurve.from_ledger(settings, trades)
        xs, ys = curve.get_trade_numbers(), curve.get_equities()
        worst = curve.max_drawdown()
    """

    def __init__(self, points: Sequence[EquityPoint]):
        self.points: list[EquityPoint] = list(points)

    @staticmethod
    def starting_equity(settings: Settings) -> float:
        if settings.is_zero_step:
            return as_number(settings.master_account_balance) or as_number(settings.account_balance)
        return as_number(settings.account_balance)

    @classmethod
    def from_ledger(cls, settings: Settings, trades: Sequence[Trade]) -> "EquityCurve":
        """
        Build the curve from stored ``equity_after`` values.

        A non-finite value repeats the previous point. Any failure degrades
        to the single starting point.
        """
        start = cls.starting_equity(settings)
        try:
            equity = start
            points = [EquityPoint(trade=0, equity=equity)]
            for index, t in enumerate(trades, start=1):
                value = float(t.equity_after)
                if math.isfinite(value):
                    equity = value
                points.append(EquityPoint(trade=index, equity=equity))
            return cls(points)
        except Exception:
            log.exception("Error calculating equity curve")
            return cls([EquityPoint(trade=0, equity=start)])

    def get_trade_numbers(self) -> np.ndarray:
        return np.array([p.trade for p in self.points], dtype=np.int64)

    def get_equities(self, count: Optional[int] = None) -> np.ndarray:
        """Equity values, oldest first; *count* limits to the most recent points."""
        points = self.points if count is None else self.points[-count:]
        return np.array([p.equity for p in points], dtype=np.float64)

    def get_drawdowns(self) -> np.ndarray:
        """Distance below the running peak at each point (zero or negative)."""
        equities = self.get_equities()
        if equities.size == 0:
            return equities
        return equities - np.maximum.accumulate(equities)

    def max_drawdown(self) -> float:
        """Largest peak-to-trough decline, as a negative amount."""
        drawdowns = self.get_drawdowns()
        return float(drawdowns.min()) if drawdowns.size else 0.0

    @property
    def latest(self) -> Optional[EquityPoint]:
        return self.points[-1] if self.points else None

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return f"EquityCurve(points={len(self)})"
