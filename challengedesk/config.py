from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_HOME = Path.home() / ".challengedesk"


@dataclass(frozen=True)
class AppConfig:
    """Process-level configuration for the command line."""
    data_dir: Path
    log_level: str = "WARNING"
    export_dir: Path = Path(".")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Read ``CHALLENGEDESK_*`` variables.

        Raises ``ValueError`` for an unknown log level.
        """
        env = os.environ if environ is None else environ

        data_dir = Path(env.get("CHALLENGEDESK_HOME") or DEFAULT_HOME).expanduser()
        level = (env.get("CHALLENGEDESK_LOG_LEVEL") or "WARNING").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"CHALLENGEDESK_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {level!r}"
            )
        export_dir = Path(env.get("CHALLENGEDESK_EXPORT_DIR") or ".").expanduser()

        return cls(data_dir=data_dir, log_level=level, export_dir=export_dir)

