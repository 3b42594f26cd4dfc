"""
User settings persistence.

Settings live in the key-value store next to history. An API key supplied
through the environment always wins over one saved by the user.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from multiglot.config import Settings, get_settings
from multiglot.core.models import UserSettings
from multiglot.storage.base import KeyValueStore, StorageKeys


logger = logging.getLogger(__name__)


class SettingsStore:
    """
    Load, update and reset ``UserSettings``.

    Usage:
        store = SettingsStore(kv)
        settings = store.load()
        store.update(languages=[Language(code="de", name="German")])
    """

    def __init__(self, store: KeyValueStore, app_settings: Settings | None = None):
        self.store = store
        self.app_settings = app_settings or get_settings()
        self._current: UserSettings | None = None

    @property
    def current(self) -> UserSettings:
        if self._current is None:
            self._current = self.load()
        return self._current

    def defaults(self) -> UserSettings:
        return UserSettings(api_key=self.app_settings.anthropic_api_key)

    def load(self) -> UserSettings:
        stored = self.store.get(StorageKeys.SETTINGS)
        if stored is None:
            return self.defaults()

        try:
            settings = UserSettings.model_validate(stored)
        except ValidationError:
            logger.warning("Stored settings are invalid, using defaults")
            return self.defaults()

        env_key = self.app_settings.anthropic_api_key
        if env_key:
            settings = settings.model_copy(update={"api_key": env_key})
        return settings

    def update(self, **changes: Any) -> UserSettings:
        """Merge ``changes`` (snake_case field names) and persist."""
        merged = self.current.model_dump()
        merged.update(changes)
        return self._save(UserSettings.model_validate(merged))

    def reset(self) -> UserSettings:
        return self._save(self.defaults())

    def _save(self, settings: UserSettings) -> UserSettings:
        self.store.set(StorageKeys.SETTINGS, settings.to_json_dict())
        self._current = settings
        return settings
