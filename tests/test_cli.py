"""Tests for challengedesk.cli – the command line over a journal directory."""

import json

import openpyxl
import pytest

from challengedesk.cli import build_parser, main
from challengedesk.config import AppConfig
from challengedesk.spreadsheet.xlsx import JOURNAL_FILENAME
from challengedesk.storage import JournalStorage, JsonFileStore
from challengedesk.types import ChallengeType


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("CHALLENGEDESK_HOME", "CHALLENGEDESK_LOG_LEVEL", "CHALLENGEDESK_EXPORT_DIR"):
        monkeypatch.delenv(name, raising=False)


def _run(home, *argv):
    return main(["--home", str(home), *argv])


def _storage(home):
    return JournalStorage(JsonFileStore(home))


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

class TestTrades:

    def test_add_then_summary_json(self, tmp_path, capsys):
        assert _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "0.03") == 0
        assert "10,120.00" in capsys.readouterr().out

        assert _run(tmp_path, "summary", "--json") == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["metrics"]["currentEquity"] == "10120.00"
        assert payload["metrics"]["totalTrades"] == 1
        assert payload["trades"][0]["outcome"] == "Win"

    def test_add_defaults_to_suggested_lot(self, tmp_path):
        _run(tmp_path, "preset", "aggressive")
        assert _run(tmp_path, "add", "--date", "2025-01-15", "--outcome", "Loss") == 0
        trade = _storage(tmp_path).load_trades()[0]
        assert trade.lot_size == 0.05
        assert trade.equity_after == 9900.00

    def test_invalid_lot_rejected(self, tmp_path, capsys):
        assert _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "abc") == 1
        assert "Please fill in" in capsys.readouterr().err
        assert _storage(tmp_path).load_trades() == []

    def test_edit_and_delete_by_prefix(self, tmp_path):
        _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "0.03")
        trade_id = _storage(tmp_path).load_trades()[0].id

        assert _run(tmp_path, "edit", trade_id[:8], "outcome", "loss") == 0
        assert _storage(tmp_path).load_trades()[0].equity_after == 9950.00

        assert _run(tmp_path, "delete", trade_id[:8]) == 0
        assert _storage(tmp_path).load_trades() == []

    def test_unknown_trade(self, tmp_path, capsys):
        assert _run(tmp_path, "delete", "nope") == 1
        assert "no unique trade" in capsys.readouterr().err

    def test_uncatalogued_entry_is_added_with_hint(self, tmp_path, capsys):
        assert _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "0.03", "--entry", "eurusd") == 0
        assert "similar: EUR/USD" in capsys.readouterr().err
        assert _storage(tmp_path).load_trades()[0].entry == "eurusd"

    def test_catalogued_entry_has_no_hint(self, tmp_path, capsys):
        _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "0.03", "--entry", "GBP/JPY")
        assert "not in the instrument list" not in capsys.readouterr().err

    def test_suggest_instruments_and_notes(self, tmp_path, capsys):
        assert _run(tmp_path, "suggest", "jpy", "--limit", "2") == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert all("JPY" in line for line in lines)

        assert _run(tmp_path, "suggest", "--notes", "session") == 0
        assert "London Session" in capsys.readouterr().out

        assert _run(tmp_path, "suggest", "zzz") == 1

    def test_summary_lists_trades(self, tmp_path, capsys):
        _run(tmp_path, "add", "--date", "2025-01-15", "--lot", "0.03", "--session", "Asian")
        capsys.readouterr()
        assert _run(tmp_path, "summary", "--trades") == 0
        out = capsys.readouterr().out
        assert "Equity:         $10,120.00" in out
        assert "Asian" in out


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:

    def test_set_persists(self, tmp_path):
        assert _run(tmp_path, "set", "risk_percent", "1") == 0
        settings = _storage(tmp_path).load_settings()
        assert settings.risk_percent == 1.0
        assert settings.risk_preset == "aggressive"

    def test_rejected_value(self, tmp_path, capsys):
        assert _run(tmp_path, "set", "risk_percent", "50") == 1
        assert "allowed 0.01..10" in capsys.readouterr().err

    def test_preset_account_challenge(self, tmp_path):
        assert _run(tmp_path, "preset", "safe") == 0
        assert _run(tmp_path, "account", "25000") == 0
        assert _run(tmp_path, "challenge", "one-step") == 0
        settings = _storage(tmp_path).load_settings()
        assert settings.risk_percent == 0.25
        assert settings.account_balance == 25000.0
        assert settings.master_account_balance == 25000.0
        assert settings.challenge_type is ChallengeType.ONE_STEP
        assert settings.phase1_target == 10.0

    def test_account_outside_catalog_is_usage_error(self, tmp_path):
        with pytest.raises(SystemExit):
            _run(tmp_path, "account", "12345")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class TestFiles:

    def test_export_xlsx(self, tmp_path, capsys):
        home = tmp_path / "home"
        _run(home, "add", "--date", "2025-01-15", "--lot", "0.03")
        capsys.readouterr()

        out = tmp_path / "exports"
        assert _run(home, "export-xlsx", "--out", str(out)) == 0
        assert capsys.readouterr().out.strip() == str(out / JOURNAL_FILENAME)
        assert openpyxl.load_workbook(out / JOURNAL_FILENAME).worksheets[0].max_row == 2

    def test_export_dir_from_environment(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        _run(home, "add", "--date", "2025-01-15", "--lot", "0.03")
        monkeypatch.setenv("CHALLENGEDESK_EXPORT_DIR", str(tmp_path / "env-out"))
        assert _run(home, "export-csv") == 0
        assert len(list((tmp_path / "env-out").glob("fundingpips-trades-*.csv"))) == 1

    def test_export_empty_ledger_fails(self, tmp_path, capsys):
        assert _run(tmp_path, "export-xlsx", "--out", str(tmp_path)) == 1
        assert "No trades to export" in capsys.readouterr().err

    def test_canonical_round_trip(self, tmp_path):
        first, second = tmp_path / "a", tmp_path / "b"
        _run(first, "add", "--date", "2025-01-15", "--lot", "0.03")
        _run(first, "add", "--date", "2025-01-16", "--lot", "0.03", "--outcome", "Loss")
        book = tmp_path / "journal.xlsx"
        assert _run(first, "export-canonical", str(book)) == 0
        assert _run(second, "import-canonical", str(book)) == 0
        assert [t.equity_after for t in _storage(second).load_trades()] == [10120.00, 10069.40]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestConfig:

    def test_bad_env_log_level(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("CHALLENGEDESK_LOG_LEVEL", "chatty")
        assert _run(tmp_path, "summary") == 1
        assert "CHALLENGEDESK_LOG_LEVEL" in capsys.readouterr().err

    def test_home_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CHALLENGEDESK_HOME", str(tmp_path))
        assert main(["set", "stop_loss_pips", "25"]) == 0
        assert _storage(tmp_path).load_settings().stop_loss_pips == 25.0

    def test_from_env_defaults(self, tmp_path):
        config = AppConfig.from_env({"CHALLENGEDESK_HOME": str(tmp_path)})
        assert config.data_dir == tmp_path
        assert config.log_level == "WARNING"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
