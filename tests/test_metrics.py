"""Tests for challengedesk.metrics – dashboard projection."""

from datetime import date

import pytest

from challengedesk.metrics import (
    Metrics,
    compute_metrics,
    daily_drawdown,
    expectancy,
    monthly_progress,
    strategy_grade,
)
from challengedesk.settings import Settings
from challengedesk.trade import Trade
from challengedesk.types import ChallengeType, Outcome, Phase, Session

TODAY = date(2025, 1, 15)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _trade(when="2025-01-15", outcome=Outcome.WIN, risk=0.0, reward=0.0, equity=0.0, master=False, n=1):
    result = reward if outcome is Outcome.WIN else -risk
    return Trade(
        id=f"t{n}",
        date=when,
        session=Session.LONDON,
        entry="XAUUSD",
        lot_size=0.1,
        outcome=outcome,
        risk_dollars=risk,
        reward_dollars=reward,
        result_dollars=result,
        equity_after=equity,
        is_master_phase=master,
    )


# ---------------------------------------------------------------------------
# Expectancy and grade
# ---------------------------------------------------------------------------

class TestExpectancy:

    def test_uses_win_rate_percentage(self):
        assert expectancy(win_rate=50.0, avg_win_pips=40, avg_loss_pips=20) == pytest.approx(10.0)

    def test_no_wins(self):
        assert expectancy(win_rate=0.0, avg_win_pips=40, avg_loss_pips=20) == pytest.approx(-20.0)

    @pytest.mark.parametrize(
        "value, grade",
        [(1.5, "A"), (1.0, "B"), (0.0, "B"), (-0.1, "C")],
    )
    def test_grade_bands(self, value, grade):
        assert strategy_grade(value) == grade


# ---------------------------------------------------------------------------
# Daily drawdown
# ---------------------------------------------------------------------------

class TestDailyDrawdown:

    def _ledger(self):
        return [
            _trade("2025-01-14", Outcome.WIN, reward=0.0, equity=10000.0, n=1),
            _trade("2025-01-15", Outcome.LOSS, risk=100.0, equity=9900.0, n=2),
            _trade("2025-01-15", Outcome.LOSS, risk=99.0, equity=9801.0, n=3),
            _trade("2025-01-15", Outcome.WIN, reward=300.0, equity=10101.0, n=4),
        ]

    def test_intraday_low_against_start_of_day(self, settings):
        dd = daily_drawdown(settings, self._ledger(), on=TODAY, equity=10101.0)
        assert dd.drawdown == pytest.approx(1.99)
        assert dd.warning is False

    def test_warning_at_limit(self):
        s = Settings(daily_drawdown_limit=1.0)
        assert daily_drawdown(s, self._ledger(), on=TODAY, equity=10101.0).warning is True

    def test_no_trades_today(self, settings):
        dd = daily_drawdown(settings, self._ledger(), on=date(2025, 2, 1), equity=10101.0)
        assert dd.drawdown == 0.0

    def test_first_day_uses_current_equity_as_baseline(self, settings):
        trades = [_trade("2025-01-15", Outcome.LOSS, risk=50.0, equity=9950.0)]
        dd = daily_drawdown(settings, trades, on=TODAY, equity=10000.0)
        assert dd.drawdown == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Monthly target
# ---------------------------------------------------------------------------

class TestMonthlyProgress:

    def _settings(self, target=1000.0):
        return Settings(
            challenge_type=ChallengeType.ZERO_STEP,
            phase1_target=0.0,
            phase2_target=0.0,
            master_account_balance=10500.0,
            monthly_target=target,
        )

    def _ledger(self):
        return [
            _trade("2025-01-31", Outcome.WIN, reward=200.0, equity=10200.0, master=True, n=1),
            _trade("2025-02-03", Outcome.WIN, reward=300.0, equity=10500.0, master=True, n=2),
        ]

    def test_baseline_is_equity_before_first_trade_of_month(self):
        m = monthly_progress(self._settings(), self._ledger(), on=date(2025, 2, 10), equity=10500.0, in_master=True)
        assert m.starting_balance == 10200.0
        assert m.progress == pytest.approx(30.0)
        assert m.target == 1000.0

    def test_no_trades_this_month_uses_master_balance(self):
        m = monthly_progress(self._settings(), self._ledger(), on=date(2025, 3, 1), equity=10500.0, in_master=True)
        assert m.starting_balance == 10500.0
        assert m.progress == 0.0

    def test_zero_target(self):
        m = monthly_progress(self._settings(0.0), self._ledger(), on=date(2025, 2, 10), equity=10500.0, in_master=True)
        assert m.progress == 0.0

    def test_not_funded(self, settings):
        s = settings.updated(monthly_target=1000.0)
        m = monthly_progress(s, self._ledger(), on=date(2025, 2, 10), equity=10500.0, in_master=False)
        assert m.progress == 0.0

    def test_clamped(self):
        m = monthly_progress(self._settings(100.0), self._ledger(), on=date(2025, 2, 10), equity=99999.0, in_master=True)
        assert m.progress == 100.0


# ---------------------------------------------------------------------------
# compute_metrics
# ---------------------------------------------------------------------------

class TestComputeMetrics:

    def test_empty_ledger(self, settings):
        m = compute_metrics(settings, [], today=TODAY)
        assert m.total_trades == 0
        assert m.win_rate == 0.0
        assert m.current_equity == 10000.0
        assert m.expectancy == pytest.approx(-20.0)
        assert m.strategy_grade == "C"
        assert m.current_phase is Phase.PHASE1

    def test_counts_and_equity(self, settings):
        trades = [
            _trade(outcome=Outcome.WIN, reward=120.0, equity=10120.0, n=1),
            _trade(outcome=Outcome.LOSS, risk=50.6, equity=10069.4, n=2),
        ]
        m = compute_metrics(settings, trades, today=date(2025, 3, 1))
        assert (m.total_trades, m.wins, m.losses) == (2, 1, 1)
        assert m.win_rate == 50.0
        assert m.current_equity == 10069.4
        assert m.expectancy == pytest.approx(10.0)
        assert m.strategy_grade == "A"

    def test_master_flag_keeps_master_after_dip(self, settings):
        trades = [_trade(outcome=Outcome.LOSS, risk=100.0, equity=9000.0, master=True)]
        m = compute_metrics(settings, trades, today=TODAY)
        assert m.current_phase is Phase.MASTER
        assert m.phase.progress == 100.0

    def test_failure_degrades_to_zeroed(self, settings):
        m = compute_metrics(settings, [object()], today=TODAY)
        assert m == Metrics.zeroed(settings)

    def test_display_formats_two_decimals(self, settings):
        trades = [_trade(outcome=Outcome.WIN, reward=120.0, equity=10120.0)]
        shown = compute_metrics(settings, trades, today=date(2025, 3, 1)).display()
        assert shown["currentEquity"] == "10120.00"
        assert shown["winRate"] == "100.00"
        assert shown["currentPhase"] == "Phase1"
        assert shown["drawdownWarning"] is False
