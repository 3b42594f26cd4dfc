"""
Storage abstraction layer.

Persistence is a plain key -> JSON map, the same shape a browser's
localStorage gives a web client. Values are JSON round-tripped on every
read and write; a value that no longer parses reads as missing instead of
raising, so a corrupted entry never takes the application down.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Storage Keys
# =============================================================================


class StorageKeys:
    """Standard keys in the key-value store."""

    SETTINGS = "translate:settings"
    HISTORY = "translate:history"
    SELECTED_TAB = "translate:selected-tab"


# =============================================================================
# Storage Interface
# =============================================================================


class KeyValueStore(ABC):
    """
    String key -> JSON value store.

    Implementations only move raw strings; encoding and decoding lives here.
    Writes must be durable before ``set`` / ``remove`` return.
    """

    @abstractmethod
    def get_raw(self, key: str) -> str | None:
        """Return the stored string, or None if absent."""
        pass

    @abstractmethod
    def set_raw(self, key: str, value: str) -> None:
        """Store a string."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        pass

    def get(self, key: str) -> Any | None:
        """Get a decoded value; invalid JSON reads as None."""
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding unreadable value for {key}")
            return None

    def set(self, key: str, value: Any) -> None:
        """Encode and store a value."""
        self.set_raw(key, json.dumps(value, ensure_ascii=False))
