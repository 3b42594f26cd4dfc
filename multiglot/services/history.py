"""
Translation history.

A content-addressed cache of past translations: entries are keyed by the
trimmed input text, kept newest first, and written back to the key-value
store after every change.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from multiglot.core.models import HistoryEntry, Translation
from multiglot.core.utils import generate_id, now_ms
from multiglot.storage.base import KeyValueStore, StorageKeys


logger = logging.getLogger(__name__)


def normalize_input(text: str) -> str:
    return text.strip()


def sort_by_newest(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    return sorted(entries, key=lambda entry: entry.created_at, reverse=True)


class HistoryCache:
    """
    Ordered, persisted collection of past translations.

    Usage:
        history = HistoryCache(store)
        entry = history.lookup("Hello")          # exact (trimmed) match
        history.insert(translation)              # dedups by input
        history.search("hel")                    # substring, minus exact
    """

    def __init__(self, store: KeyValueStore, key: str = StorageKeys.HISTORY):
        self.store = store
        self.key = key
        self._entries: list[HistoryEntry] = _dedupe(sort_by_newest(self._load()))
        self._last_created_at = max((e.created_at for e in self._entries), default=0)

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def entries(self) -> list[HistoryEntry]:
        """Entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def lookup(self, raw_input: str) -> HistoryEntry | None:
        """Exact match on trimmed input."""
        text = normalize_input(raw_input)
        if not text:
            return None
        return next((e for e in self._entries if normalize_input(e.input) == text), None)

    def search(self, query: str) -> list[HistoryEntry]:
        """
        Case-insensitive substring search over inputs.

        An entry equal to the query is left out: the caller already gets
        that one from ``lookup``. A blank query finds nothing.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        results = []
        for entry in self._entries:
            haystack = entry.input.strip().lower()
            if needle in haystack and haystack != needle:
                results.append(entry)
        return results

    # =========================================================================
    # Mutations
    # =========================================================================

    def insert(self, translation: Translation) -> HistoryEntry:
        """
        Add a translation, replacing any entry with the same input.

        The entry moves to the front with a fresh ``created_at``.
        """
        text = normalize_input(translation.input)
        if translation.input != text:
            translation = translation.model_copy(update={"input": text})

        created_at = self._next_timestamp()
        existing = self.lookup(text)

        if existing is not None:
            entry = existing.model_copy(update={"translation": translation, "created_at": created_at})
            rest = [e for e in self._entries if e.id != existing.id]
        else:
            entry = HistoryEntry(
                id=generate_id("hist"),
                input=text,
                translation=translation,
                created_at=created_at,
            )
            rest = self._entries

        self._commit([entry, *rest])
        return entry

    def remove(self, entry_id: str) -> bool:
        remaining = [e for e in self._entries if e.id != entry_id]
        removed = len(remaining) != len(self._entries)
        self._commit(remaining)
        return removed

    def clear(self) -> None:
        self._commit([])

    # =========================================================================
    # Persistence
    # =========================================================================

    def _next_timestamp(self) -> int:
        # Two inserts in the same millisecond must still order correctly
        stamp = max(now_ms(), self._last_created_at + 1)
        self._last_created_at = stamp
        return stamp

    def _load(self) -> list[HistoryEntry]:
        stored = self.store.get(self.key)
        if stored is None:
            return []
        if not isinstance(stored, list):
            logger.warning(f"Ignoring history under {self.key}: not a list")
            return []

        entries: list[HistoryEntry] = []
        for raw in stored:
            entry = _parse_entry(raw)
            if entry is not None:
                entries.append(entry)
        if len(entries) != len(stored):
            logger.warning(f"Dropped {len(stored) - len(entries)} unreadable history entries")
        return entries

    def _commit(self, entries: list[HistoryEntry]) -> None:
        # Memory changes only once the store has accepted the write
        self.store.set(self.key, [entry.to_json_dict() for entry in entries])
        self._entries = entries


def _dedupe(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    """Keep the newest entry per input; expects newest-first order."""
    seen: set[str] = set()
    unique = []
    for entry in entries:
        key = normalize_input(entry.input)
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def _parse_entry(raw: Any) -> HistoryEntry | None:
    try:
        return HistoryEntry.model_validate(raw)
    except ValidationError:
        return None
