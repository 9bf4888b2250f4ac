from __future__ import annotations

import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


class LocalStorage:
    """Flat string key-value store persisted as one JSON file.

    Values are strings, as in a browser's localStorage; callers serialise
    their own payloads. Every write replaces the file atomically.
    """

    def __init__(self, path: str):
        self.path = path
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                data = json.load(fp)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable local storage %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring local storage %s: expected a JSON object", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items() if value is not None}

    def _flush(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".local_storage.", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(self._items, fp, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def keys(self) -> list[str]:
        return sorted(self._items)
