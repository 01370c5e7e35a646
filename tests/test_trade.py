"""Tests for challengedesk.trade – Trade records and add-trade validation."""

from datetime import date

import pytest

from challengedesk.trade import Trade, TradeDraft, TradeValidationError, format_lot
from challengedesk.types import Outcome, Session


# ---------------------------------------------------------------------------
# TradeDraft
# ---------------------------------------------------------------------------

class TestTradeDraft:

    def test_valid_draft(self):
        trade = TradeDraft(date="2025-01-15", lot_size="0.03", outcome="Loss", notes="late entry").validate()
        assert trade.entry == "XAUUSD"
        assert trade.session is Session.LONDON
        assert trade.lot_size == 0.03
        assert trade.outcome is Outcome.LOSS
        assert trade.notes == "late entry"
        assert trade.equity_after == 0.0
        assert len(trade.id) == 32

    @pytest.mark.parametrize(
        "draft",
        [
            TradeDraft(date="", lot_size="0.03"),
            TradeDraft(date="2025-01-15", lot_size=""),
            TradeDraft(date="2025-01-15", lot_size="0"),
            TradeDraft(date="2025-01-15", lot_size="abc"),
            TradeDraft(date="2025-01-15", lot_size="0.03", entry="  "),
        ],
    )
    def test_incomplete_draft_rejected(self, draft):
        with pytest.raises(TradeValidationError, match="Please fill in Entry, Lot Size, and Date"):
            draft.validate()

    def test_validation_error_is_value_error(self):
        assert issubclass(TradeValidationError, ValueError)

    def test_for_today(self):
        draft = TradeDraft.for_today("0.05", today=date(2025, 1, 15))
        assert draft.date == "2025-01-15"
        assert draft.lot_size == "0.05"
        assert draft.outcome == "Win"


# ---------------------------------------------------------------------------
# Trade
# ---------------------------------------------------------------------------

class TestTrade:

    def _trade(self, **kw):
        base = dict(
            id="abc",
            date="2025-01-15",
            session=Session.NEW_YORK,
            entry="XAUUSD",
            lot_size=0.03,
            outcome=Outcome.WIN,
            notes="ok",
            risk_dollars=50.0,
            reward_dollars=120.0,
            result_dollars=120.0,
            equity_after=10120.0,
        )
        base.update(kw)
        return Trade(**base)

    def test_dict_round_trip(self):
        trade = self._trade()
        data = trade.to_dict()
        assert data["session"] == "New York"
        assert data["outcome"] == "Win"
        assert Trade.from_dict(data) == trade

    def test_from_camel_case(self):
        trade = Trade.from_dict(
            {
                "id": 1736899200000,
                "date": "2025-01-15",
                "session": "New York",
                "entry": "XAUUSD",
                "lotSize": "0.05",
                "outcome": "win",
                "riskDollars": 50,
                "equityAfter": 10120,
                "isMasterPhase": True,
            }
        )
        assert trade.id == "1736899200000"
        assert trade.session is Session.NEW_YORK
        assert trade.lot_size == 0.05
        assert trade.outcome is Outcome.WIN
        assert trade.equity_after == 10120.0
        assert trade.is_master_phase is True

    def test_bad_fields_coerced(self):
        trade = Trade.from_dict({"outcome": "breakeven", "lot_size": "x", "equity_after": "NaN"})
        assert trade.outcome is Outcome.LOSS
        assert trade.lot_size == 0.0
        assert trade.equity_after == 0.0
        assert trade.id

    @pytest.mark.parametrize(
        "stored, flag",
        [(True, True), (False, False), ("false", False), ("False", False), ("true", True), ("0", False), (1, True), (None, False)],
    )
    def test_master_flag_from_storage(self, stored, flag):
        assert Trade.from_dict({"is_master_phase": stored}).is_master_phase is flag

    def test_camel_case_master_flag(self):
        assert Trade.from_dict({"isMasterPhase": "false"}).is_master_phase is False

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValueError):
            Trade.from_dict(["not", "a", "trade"])

    def test_dedup_key(self):
        assert self._trade().dedup_key == "2025-01-15|XAUUSD|0.03"
        assert self._trade(lot_size=1.0).dedup_key == "2025-01-15|XAUUSD|1"

    def test_with_fields_returns_copy(self):
        trade = self._trade()
        changed = trade.with_fields(notes="edited")
        assert changed.notes == "edited"
        assert trade.notes == "ok"


class TestFormatLot:

    @pytest.mark.parametrize(
        "lot, text",
        [(0.03, "0.03"), (1.0, "1"), (0.125, "0.125"), (0.1 + 0.2, "0.3")],
    )
    def test_canonical_text(self, lot, text):
        assert format_lot(lot) == text
