"""
Local storage implementations.

In-memory for tests and embedding, a single JSON file for the CLI.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from multiglot.storage.base import KeyValueStore


logger = logging.getLogger(__name__)


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_raw(self, key: str) -> str | None:
        return self._data.get(key)

    def set_raw(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


# =============================================================================
# JSON File Store
# =============================================================================


class JsonFileStore(KeyValueStore):
    """
    All keys in one JSON object on disk.

    The file maps keys to encoded JSON strings. Every write rewrites the
    file through a temp file and ``os.replace`` so a crash mid-write
    leaves the previous version intact.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self.path}: not a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self, data: dict[str, str]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_raw(self, key: str) -> str | None:
        return self._data.get(key)

    def set_raw(self, key: str, value: str) -> None:
        data = {**self._data, key: value}
        self._flush(data)
        self._data = data

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        data = {k: v for k, v in self._data.items() if k != key}
        self._flush(data)
        self._data = data


def create_local_store(data_dir: str = "./data") -> JsonFileStore:
    """Create the file-backed store used by the CLI."""
    return JsonFileStore(Path(data_dir) / "store.json")
