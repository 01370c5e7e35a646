"""Challenge phase and target resolution."""

from dataclasses import dataclass

from challengedesk.risk import as_number
from challengedesk.settings import Settings
from challengedesk.types import ChallengeType, Phase


__all__ = [
    "PhaseStatus",
    "clamp_percent",
    "phase_targets",
    "resolve_phase",
]


@dataclass(frozen=True)
class PhaseStatus:
    """Where a given equity value sits within the challenge."""
    phase: Phase
    progress: float           # progress within the current phase, [0, 100]
    phase_target: float       # equity required to clear the current phase
    phase1_target: float      # absolute $ thresholds; 0 where not applicable
    phase2_target: float
    phase1_progress: float
    phase2_progress: float
    starting_balance: float   # baseline for the equity chain in this phase

    @property
    def is_master(self) -> bool:
        return self.phase is Phase.MASTER


def clamp_percent(value: float) -> float:
    """Clamp to [0, 100]; non-finite input maps to 0."""
    number = as_number(value)
    return max(0.0, min(100.0, number))


def _interval_progress(equity: float, lo: float, hi: float) -> float:
    if equity < lo:
        return 0.0
    if hi <= lo:
        return 100.0
    return clamp_percent((equity - lo) / (hi - lo) * 100.0)


def phase_targets(settings: Settings) -> tuple[float, float]:
    """Absolute phase 1 / phase 2 equity targets for *settings*."""
    balance = as_number(settings.account_balance)
    if settings.challenge_type is ChallengeType.ZERO_STEP:
        return 0.0, 0.0
    p1 = balance * (1 + as_number(settings.phase1_target) / 100.0)
    if settings.challenge_type is ChallengeType.ONE_STEP:
        return p1, 0.0
    return p1, p1 * (1 + as_number(settings.phase2_target) / 100.0)


def resolve_phase(settings: Settings, equity: float) -> PhaseStatus:
    """
    Resolve the challenge phase for *equity*.

    - zero-step: always Master, baseline ``master_account_balance``
    - one-step: Master at or above the phase 1 target
    - two-step: Phase 2 at or above the phase 1 target, Master at or above
      the phase 2 target

    Progress values are always within [0, 100].
    """
    equity = as_number(equity)
    balance = as_number(settings.account_balance)
    master_balance = as_number(settings.master_account_balance, balance)
    p1, p2 = phase_targets(settings)

    if settings.challenge_type is ChallengeType.ZERO_STEP:
        return PhaseStatus(
            phase=Phase.MASTER,
            progress=100.0,
            phase_target=master_balance,
            phase1_target=0.0,
            phase2_target=0.0,
            phase1_progress=0.0,
            phase2_progress=0.0,
            starting_balance=master_balance,
        )

    phase1_progress = _interval_progress(equity, balance, p1)

    if settings.challenge_type is ChallengeType.ONE_STEP:
        if equity >= p1:
            return PhaseStatus(Phase.MASTER, 100.0, p1, p1, 0.0, 100.0, 0.0, master_balance)
        return PhaseStatus(Phase.PHASE1, phase1_progress, p1, p1, 0.0, phase1_progress, 0.0, balance)

    phase2_progress = _interval_progress(equity, p1, p2)
    if equity >= p2:
        return PhaseStatus(Phase.MASTER, 100.0, p2, p1, p2, 100.0, 100.0, master_balance)
    if equity >= p1:
        return PhaseStatus(Phase.PHASE2, phase2_progress, p2, p1, p2, 100.0, phase2_progress, balance)
    return PhaseStatus(Phase.PHASE1, phase1_progress, p1, p1, p2, phase1_progress, 0.0, balance)
