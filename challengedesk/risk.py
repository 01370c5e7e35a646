"""Risk management utilities."""

import math
from dataclasses import dataclass

# 1 standard lot = $100 per pip, for every instrument (0.01 lot = $1/pip).
PIP_VALUE_PER_LOT = 100.0


def as_number(value: object, default: float = 0.0) -> float:
    """Coerce *value* to a finite float, returning *default* otherwise."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def risk_dollars(*, equity: float, risk_percent: float) -> float:
    """Cash at risk on the next trade: ``equity * risk_percent / 100``."""
    return as_number(equity) * as_number(risk_percent) / 100.0


def reward_dollars(*, lot_size: float, take_profit_pips: float) -> float:
    """
    Cash won when the take-profit is hit.

    ``lot_size * take_profit_pips * PIP_VALUE_PER_LOT``, or 0 when either
    input is not positive.
    """
    lot = as_number(lot_size)
    tp = as_number(take_profit_pips)
    if lot <= 0 or tp <= 0:
        return 0.0
    return lot * tp * PIP_VALUE_PER_LOT


def suggested_lot_size(*, risk: float, stop_loss_pips: float) -> str:
    """
    Lot size that loses exactly *risk* when the stop-loss is hit.

    Example: $25 risk with a 25 pip stop -> 25 / (25 * 100) = "0.01".
    Returned as a 2 decimal string; "0.00" when the stop is not positive.
    """
    sl = as_number(stop_loss_pips)
    if sl <= 0:
        return "0.00"
    return f"{as_number(risk) / (sl * PIP_VALUE_PER_LOT):.2f}"


@dataclass(frozen=True)
class LotSizeSuggestion:
    lot_size: str
    risk_dollars: float
    current_equity: float


def suggest_lot_size(
    *,
    current_equity: float,
    risk_percent: float,
    stop_loss_pips: float,
) -> LotSizeSuggestion:
    """Pre-fill values for the add-trade form."""
    risk = risk_dollars(equity=current_equity, risk_percent=risk_percent)
    return LotSizeSuggestion(
        lot_size=suggested_lot_size(risk=risk, stop_loss_pips=stop_loss_pips),
        risk_dollars=risk,
        current_equity=as_number(current_equity),
    )
