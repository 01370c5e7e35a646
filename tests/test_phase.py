"""Tests for challengedesk.phase – phase and target resolution."""

import pytest

from challengedesk.phase import clamp_percent, phase_targets, resolve_phase
from challengedesk.settings import Settings
from challengedesk.types import ChallengeType, Phase


# ---------------------------------------------------------------------------
# clamp_percent
# ---------------------------------------------------------------------------

class TestClampPercent:

    def test_bounds(self):
        assert clamp_percent(150.0) == 100.0
        assert clamp_percent(-5.0) == 0.0
        assert clamp_percent(42.0) == 42.0

    def test_nan_is_zero(self):
        assert clamp_percent(float("nan")) == 0.0


# ---------------------------------------------------------------------------
# Zero-step
# ---------------------------------------------------------------------------

class TestZeroStep:

    def test_always_master(self, zero_step):
        for equity in (0.0, 5000.0, 50000.0):
            status = resolve_phase(zero_step, equity)
            assert status.phase is Phase.MASTER
            assert status.progress == 100.0
            assert status.starting_balance == 10000.0

    def test_targets_are_zero(self, zero_step):
        assert phase_targets(zero_step) == (0.0, 0.0)


# ---------------------------------------------------------------------------
# One-step
# ---------------------------------------------------------------------------

class TestOneStep:

    def test_target(self, one_step):
        p1, p2 = phase_targets(one_step)
        assert p1 == pytest.approx(11000.0)
        assert p2 == 0.0

    def test_progress_within_phase1(self, one_step):
        status = resolve_phase(one_step, 10500.0)
        assert status.phase is Phase.PHASE1
        assert status.progress == pytest.approx(50.0)
        assert status.starting_balance == 10000.0

    def test_below_starting_balance_is_zero(self, one_step):
        assert resolve_phase(one_step, 9000.0).progress == 0.0
        assert resolve_phase(one_step, -500.0).progress == 0.0

    def test_master_at_or_above_target(self, one_step):
        status = resolve_phase(one_step, 11500.0)
        assert status.phase is Phase.MASTER
        assert status.progress == 100.0
        assert status.is_master

    def test_zero_target_counts_as_complete(self):
        s = Settings(challenge_type=ChallengeType.ONE_STEP, phase1_target=0.0)
        assert resolve_phase(s, 10000.0).is_master


# ---------------------------------------------------------------------------
# Two-step
# ---------------------------------------------------------------------------

class TestTwoStep:

    def test_targets_compound(self, settings):
        p1, p2 = phase_targets(settings)
        assert p1 == pytest.approx(10800.0)
        assert p2 == pytest.approx(11340.0)

    def test_phase1(self, settings):
        status = resolve_phase(settings, 10400.0)
        assert status.phase is Phase.PHASE1
        assert status.progress == pytest.approx(50.0)
        assert status.phase2_progress == 0.0

    def test_phase2_progress_over_second_interval(self, settings):
        status = resolve_phase(settings, 10900.0)
        assert status.phase is Phase.PHASE2
        assert status.phase1_progress == 100.0
        assert status.progress == pytest.approx(100.0 / 540.0 * 100.0)
        assert status.phase_target == pytest.approx(11340.0)

    def test_master(self, settings):
        status = resolve_phase(settings, 11400.0)
        assert status.phase is Phase.MASTER
        assert status.phase1_progress == 100.0
        assert status.phase2_progress == 100.0
        assert status.starting_balance == settings.master_account_balance

    @pytest.mark.parametrize("equity", [-1e9, -1.0, 0.0, 9999.99, 10800.0, 11339.0, 1e12])
    def test_progress_always_clamped(self, settings, equity):
        status = resolve_phase(settings, equity)
        for value in (status.progress, status.phase1_progress, status.phase2_progress):
            assert 0.0 <= value <= 100.0
