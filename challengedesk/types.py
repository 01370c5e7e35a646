"""Challenge and trade enumerations."""

from enum import Enum


class ChallengeType(str, Enum):
    """Challenge topology.

    The value is the wire/storage spelling used by persisted settings.
    """
    TWO_STEP = "two-step"
    ONE_STEP = "one-step"
    ZERO_STEP = "zero-step"

    @classmethod
    def parse(cls, value: object) -> "ChallengeType":
        """Return the matching type, defaulting to two-step for unknown input."""
        if isinstance(value, cls):
            return value
        s = str(value or "").strip().lower().replace("_", "-")
        for member in cls:
            if member.value == s:
                return member
        return cls.TWO_STEP


class Outcome(str, Enum):
    WIN = "Win"
    LOSS = "Loss"

    @classmethod
    def parse(cls, value: object) -> "Outcome | None":
        """Case-insensitive match, ``None`` if the value is neither outcome."""
        if isinstance(value, cls):
            return value
        s = str(value or "").strip().lower()
        if s == "win":
            return cls.WIN
        if s == "loss":
            return cls.LOSS
        return None


class Session(str, Enum):
    ASIAN = "Asian"
    LONDON = "London"
    NEW_YORK = "New York"
    OVERLAP = "Overlap"

    @classmethod
    def parse(cls, value: object, default: "Session | None" = None) -> "Session":
        """Match a session name; unknown or blank input falls back to London."""
        if isinstance(value, cls):
            return value
        s = " ".join(str(value or "").split()).lower()
        for member in cls:
            if member.value.lower() == s:
                return member
        return default or cls.LONDON


class Phase(str, Enum):
    PHASE1 = "Phase1"
    PHASE2 = "Phase2"
    MASTER = "Master"

    @property
    def label(self) -> str:
        """Human readable name ("Phase 1", "Phase 2", "Master")."""
        if self is Phase.PHASE1:
            return "Phase 1"
        if self is Phase.PHASE2:
            return "Phase 2"
        return "Master"
