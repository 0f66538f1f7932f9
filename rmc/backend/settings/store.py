from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from .models import GlobalSettings


logger = logging.getLogger(__name__)


class SettingsStore:
    """
    JSON-file backed settings.

    A missing or unreadable file yields default settings; saving writes a
    sibling `.tmp` file and replaces the target.
    """

    def __init__(self, *, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> GlobalSettings:
        with self._lock:
            if not self._path.exists():
                return GlobalSettings()

            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
                return GlobalSettings()

            if not isinstance(raw, dict):
                logger.warning("Ignoring settings file %s: expected a JSON object", self._path)
                return GlobalSettings()

            return GlobalSettings.from_persist_dict(raw)

    def save(self, settings: GlobalSettings) -> None:
        payload = json.dumps(settings.to_persist_dict(), ensure_ascii=False, indent=2) + "\n"

        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self._path)

    def update(self, **changes: Any) -> GlobalSettings:
        with self._lock:
            current = self.load()
            unknown = [key for key in changes if not hasattr(current, key)]
            if unknown:
                raise KeyError(", ".join(sorted(unknown)))
            updated = replace(current, **changes)
            self.save(updated)
            return updated
