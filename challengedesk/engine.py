"""
Equity and phase recalculation.

The ledger's financial fields form a chain: each trade's risk is a share of
the equity left by the trade before it, and crossing a challenge target moves
the chain onto the master account. :func:`recalculate` re-derives that chain
for a suffix of the ledger as a left fold over ``(equity, in_master)``.

The engine runs inside interactive handlers, so it never raises. Numeric
problems are replaced with a baseline equity and reported as
:class:`Fallback` entries; an unexpected exception leaves the ledger unchanged
and is reported through :attr:`Recalculation.error`.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from challengedesk.phase import resolve_phase
from challengedesk.risk import as_number, reward_dollars, risk_dollars
from challengedesk.settings import Settings
from challengedesk.trade import Trade
from challengedesk.types import Outcome

log = logging.getLogger(__name__)


__all__ = [
    "EquityState",
    "Fallback",
    "Recalculation",
    "initial_state",
    "recalculate",
    "step",
]


@dataclass(frozen=True)
class EquityState:
    """Fold accumulator carried from one trade to the next."""
    equity: float
    in_master: bool


@dataclass(frozen=True)
class Fallback:
    """A value that was replaced because it was not a finite number."""
    index: int
    reason: str


@dataclass(frozen=True)
class Recalculation:
    trades: list[Trade]
    # New master balance to store in settings; None means leave it alone.
    master_account_balance: float | None = None
    fallbacks: list[Fallback] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _master_balance(settings: Settings) -> float:
    return as_number(settings.master_account_balance, as_number(settings.account_balance))


def initial_state(settings: Settings, trades: Sequence[Trade], start: int) -> EquityState:
    """
    Equity and phase in force immediately before ``trades[start]``.

    A pass that starts mid-ledger continues from the previous trade's
    ``equity_after``. The master balance is only the baseline for the first
    trade of a zero-step ledger; crossing into Master mid-pass is handled by
    :func:`step`.
    """
    previous = trades[start - 1] if 0 < start <= len(trades) else None
    in_master = settings.is_zero_step or (previous is not None and previous.is_master_phase)

    if previous is None:
        if in_master:
            return EquityState(equity=_master_balance(settings), in_master=True)
        return EquityState(equity=as_number(settings.account_balance), in_master=False)

    fallback = _master_balance(settings) if in_master else as_number(settings.account_balance)
    return EquityState(equity=as_number(previous.equity_after, fallback), in_master=in_master)


def step(
    settings: Settings, state: EquityState, trade: Trade
) -> tuple[Trade, EquityState, str | None]:
    """
    Apply one trade to *state*.

    Returns the trade with its derived fields rewritten, the state to carry
    forward (equity at full precision) and a fallback reason if the
    resulting equity had to be replaced.
    """
    equity = state.equity
    in_master = state.in_master

    if not in_master and not settings.is_zero_step:
        if resolve_phase(settings, equity).is_master:
            in_master = True
            equity = _master_balance(settings)

    risk = risk_dollars(equity=equity, risk_percent=settings.risk_percent)
    reward = reward_dollars(lot_size=trade.lot_size, take_profit_pips=settings.take_profit_pips)
    result = reward if trade.outcome is Outcome.WIN else -risk
    equity = equity + result

    reason = None
    if not math.isfinite(equity):
        reason = f"equity became {equity!r}"
        equity = _master_balance(settings) if in_master else as_number(settings.account_balance)

    updated = trade.with_fields(
        risk_dollars=round(as_number(risk), 2),
        reward_dollars=round(as_number(reward), 2),
        result_dollars=round(as_number(result), 2),
        equity_after=round(equity, 2),
        is_master_phase=in_master,
    )
    return updated, EquityState(equity=equity, in_master=in_master), reason


def recalculate(settings: Settings, trades: Sequence[Trade], start: int = 0) -> Recalculation:
    """
    Re-derive every financial field from ``trades[start]`` to the end.

    Trades before *start* are returned untouched. Pass ``start=0`` for a full
    recalculation (settings change, delete, import) or the edited index for
    an incremental one.

    When the last trade ends up in the master phase (or the challenge is
    zero-step), the result carries the new ``master_account_balance`` for
    the caller to store.
    """
    try:
        start = max(0, min(int(start), len(trades)))
        out = list(trades[:start])
        fallbacks: list[Fallback] = []

        state = initial_state(settings, trades, start)
        for index in range(start, len(trades)):
            updated, state, reason = step(settings, state, trades[index])
            if reason is not None:
                log.warning("Trade %d: %s, reset to baseline equity", index + 1, reason)
                fallbacks.append(Fallback(index=index, reason=reason))
            out.append(updated)

        master_balance = None
        if out and (out[-1].is_master_phase or settings.is_zero_step):
            master_balance = out[-1].equity_after

        log.debug(
            "Recalculated %d of %d trades from index %d", len(out) - start, len(out), start
        )
        return Recalculation(trades=out, master_account_balance=master_balance, fallbacks=fallbacks)
    except Exception as exc:
        log.exception("Recalculation failed; keeping previous ledger")
        return Recalculation(trades=list(trades), error=str(exc) or type(exc).__name__)
