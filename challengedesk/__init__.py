# challengedesk/__init__.py
"""
Challengedesk - Trading journal for prop-firm funded-account challenges.

Tracks trades against a phased challenge, sizes positions from risk
settings, re-derives the equity chain on every change and reads/writes
the journal as spreadsheets.
"""

from .engine import Recalculation, recalculate
from .equity import EquityCurve
from .journal import ChallengeJournal
from .metrics import Metrics, compute_metrics
from .phase import PhaseStatus, resolve_phase
from .settings import Settings
from .storage import JournalStorage, JsonFileStore, MemoryStore
from .trade import Trade, TradeDraft, TradeValidationError
from .types import ChallengeType, Outcome, Phase, Session

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ChallengeJournal",
    "ChallengeType",
    "EquityCurve",
    "JournalStorage",
    "JsonFileStore",
    "MemoryStore",
    "Metrics",
    "Outcome",
    "Phase",
    "PhaseStatus",
    "Recalculation",
    "Session",
    "Settings",
    "Trade",
    "TradeDraft",
    "TradeValidationError",
    "compute_metrics",
    "recalculate",
    "resolve_phase",
]
