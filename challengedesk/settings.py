"""Account settings for a funded-account challenge."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping

from challengedesk.types import ChallengeType

log = logging.getLogger(__name__)


__all__ = [
    "AUTO_MAINTAINED_FIELDS",
    "CHALLENGE_ACCOUNTS",
    "NUMERIC_LIMITS",
    "RECALCULATING_FIELDS",
    "RISK_PRESETS",
    "Settings",
    "coerce_setting_value",
    "default_phase_targets",
    "detect_risk_preset",
]


RISK_PRESETS: dict[str, float] = {
    "safe": 0.25,
    "balanced": 0.5,
    "aggressive": 1.0,
}

CHALLENGE_ACCOUNTS = (5000, 10000, 25000, 50000, 100000)

# Inclusive (min, max) accepted on edit.
NUMERIC_LIMITS: dict[str, tuple[float, float]] = {
    "account_balance": (1, 10_000_000),
    "master_account_balance": (1, 10_000_000),
    "risk_percent": (0.01, 10),
    "stop_loss_pips": (1, 10_000),
    "take_profit_pips": (1, 10_000),
    "phase1_target": (0, 100),
    "phase2_target": (0, 100),
    "daily_drawdown_limit": (0, 100),
    "monthly_target": (0, 10_000_000),
}

# Written by the recalculation engine; the edit range does not apply on load.
AUTO_MAINTAINED_FIELDS = frozenset({"master_account_balance"})

# Fields whose change invalidates every trade's financials.
RECALCULATING_FIELDS = frozenset(
    {"account_balance", "risk_percent", "stop_loss_pips", "take_profit_pips"}
)

# Storage keys written by the browser version of the journal.
_CAMEL_KEYS = {
    "accountBalance": "account_balance",
    "riskPercent": "risk_percent",
    "riskPreset": "risk_preset",
    "stopLossPips": "stop_loss_pips",
    "takeProfitPips": "take_profit_pips",
    "phase1Target": "phase1_target",
    "phase2Target": "phase2_target",
    "dailyDrawdownLimit": "daily_drawdown_limit",
    "challengeType": "challenge_type",
    "masterAccountBalance": "master_account_balance",
    "monthlyTarget": "monthly_target",
}


def detect_risk_preset(risk_percent: float) -> str:
    """Name of the preset matching *risk_percent*, or ``"custom"``."""
    for name, value in RISK_PRESETS.items():
        if abs(float(risk_percent) - value) < 0.001:
            return name
    return "custom"


def default_phase_targets(challenge_type: ChallengeType) -> tuple[float, float]:
    """Phase targets (percent) applied when the challenge type is switched."""
    if challenge_type is ChallengeType.TWO_STEP:
        return 8.0, 5.0
    if challenge_type is ChallengeType.ONE_STEP:
        return 10.0, 0.0
    return 0.0, 0.0


def coerce_setting_value(key: str, value: Any, enforce_limits: bool = True) -> float | None:
    """
    Validate a raw edit for numeric setting *key*.

    Returns the parsed number, or ``None`` when the value must be rejected:
    empty, non-numeric, non-finite, negative, or outside ``NUMERIC_LIMITS``
    when *enforce_limits* is set.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None

    # "0050" -> "50", but keep "0.5"
    if len(text) > 1 and text[0] == "0" and text[1] != ".":
        text = text.lstrip("0") or "0"

    try:
        number = float(text)
    except ValueError:
        return None

    if not math.isfinite(number) or number < 0:
        return None

    limits = NUMERIC_LIMITS.get(key) if enforce_limits else None
    if limits is not None:
        lo, hi = limits
        if number < lo or number > hi:
            return None
    return number


@dataclass(frozen=True)
class Settings:
    """Challenge configuration.

    The journal owns exactly one instance and replaces it on every change;
    computation functions receive it explicitly.
    """

    account_balance: float = 10000.0
    risk_percent: float = 0.5
    risk_preset: str = "balanced"
    stop_loss_pips: float = 20.0
    take_profit_pips: float = 40.0
    phase1_target: float = 8.0
    phase2_target: float = 5.0
    daily_drawdown_limit: float = 5.0
    challenge_type: ChallengeType = ChallengeType.TWO_STEP
    master_account_balance: float = 10000.0
    monthly_target: float = 0.0

    @property
    def is_zero_step(self) -> bool:
        return self.challenge_type is ChallengeType.ZERO_STEP

    def updated(self, **changes: Any) -> Settings:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["challenge_type"] = self.challenge_type.value
        return data

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> Settings:
        """Build settings from a persisted mapping.

        Accepts snake_case or the legacy camelCase keys. Individual fields that
        are missing or invalid fall back to their defaults; only a non-mapping
        input is an error.
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"settings must be a mapping, got {type(raw).__name__}")

        data = {_CAMEL_KEYS.get(k, k): v for k, v in raw.items()}
        defaults = cls()
        values: dict[str, Any] = {}

        for key in NUMERIC_LIMITS:
            if key not in data:
                continue
            number = coerce_setting_value(key, data[key], enforce_limits=key not in AUTO_MAINTAINED_FIELDS)
            if number is None:
                log.warning("Ignoring invalid stored setting %s=%r", key, data[key])
                continue
            values[key] = number

        if "challenge_type" in data:
            values["challenge_type"] = ChallengeType.parse(data["challenge_type"])

        risk = values.get("risk_percent", defaults.risk_percent)
        preset = str(data.get("risk_preset") or "")
        if preset not in RISK_PRESETS and preset != "custom":
            preset = detect_risk_preset(risk)
        values["risk_preset"] = preset

        return cls(**values)
