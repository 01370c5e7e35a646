# tests/conftest.py
import pytest

from challengedesk.journal import ChallengeJournal
from challengedesk.settings import Settings
from challengedesk.storage import JournalStorage, MemoryStore
from challengedesk.types import ChallengeType


@pytest.fixture
def settings():
    """Stock two-step challenge: 10k balance, 0.5% risk, SL 20 / TP 40."""
    return Settings()


@pytest.fixture
def one_step():
    """One-step challenge with a 10% target ($11,000 on a 10k account)."""
    return Settings(challenge_type=ChallengeType.ONE_STEP, phase1_target=10.0, phase2_target=0.0)


@pytest.fixture
def zero_step():
    """Zero-step challenge: funded from the first trade on a 10k master account."""
    return Settings(
        challenge_type=ChallengeType.ZERO_STEP,
        account_balance=5000.0,
        master_account_balance=10000.0,
        phase1_target=0.0,
        phase2_target=0.0,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def journal(store, one_step):
    return ChallengeJournal(JournalStorage(store), settings=one_step)
