"""Settings and trade persistence over a string key-value store."""

import errno
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from challengedesk.settings import Settings
from challengedesk.trade import Trade

log = logging.getLogger(__name__)


SETTINGS_KEY = "propFirmSettings"
TRADES_KEY = "propFirmTrades"

QUOTA_WARNING = "Storage quota exceeded. Please clear some data."
SAVE_WARNING = "Could not save journal data: {error}"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store; used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    One ``<key>.json`` file per slot under a directory.

    Writes are atomic: the value goes to a hidden ``.tmp`` file which is then
    renamed over the slot.
    """

    def __init__(self, directory: Path):
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self._dir / f".{key}.json.tmp"
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, self._path(key))

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class JournalStorage:
    """
    Load/save contract for the two journal slots.

    Read pattern:
      A slot that fails to parse, or holds the wrong shape (settings not an
      object, trades not a list), is removed and defaults are used instead.

    Write pattern:
      Every change overwrites the whole slot. Failures never raise; the
      returned message is meant to be shown to the user.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load_settings(self) -> Settings:
        try:
            raw = self.store.get(SETTINGS_KEY)
            if raw is None:
                return Settings()
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            return Settings.from_raw(data)
        except Exception:
            log.exception("Failed to load settings; clearing stored copy")
            self._discard(SETTINGS_KEY)
            return Settings()

    def load_trades(self) -> list[Trade]:
        try:
            raw = self.store.get(TRADES_KEY)
            if raw is None:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
        except Exception:
            log.exception("Failed to load trades; clearing stored copy")
            self._discard(TRADES_KEY)
            return []

        trades = []
        for item in data:
            if not isinstance(item, dict):
                log.warning("Skipping stored trade that is not an object: %r", item)
                continue
            trades.append(Trade.from_dict(item))
        return trades

    def save_settings(self, settings: Settings) -> str | None:
        return self._save(SETTINGS_KEY, json.dumps(settings.to_dict()))

    def save_trades(self, trades: list[Trade]) -> str | None:
        return self._save(TRADES_KEY, json.dumps([t.to_dict() for t in trades]))

    def _save(self, key: str, payload: str) -> str | None:
        try:
            self.store.set(key, payload)
        except OSError as exc:
            log.error("Error saving %s: %s", key, exc)
            if exc.errno == errno.ENOSPC:
                return QUOTA_WARNING
            return SAVE_WARNING.format(error=exc)
        log.debug("Saved %s (%d bytes)", key, len(payload))
        return None

    def _discard(self, key: str) -> None:
        try:
            self.store.remove(key)
        except OSError:
            log.exception("Could not remove corrupt slot %s", key)
