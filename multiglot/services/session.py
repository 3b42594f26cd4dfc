"""
TranslationSession - the coordinator behind the translate box.

Owns the visible state (status, current translation, error) for one user
and decides between the history cache and a fresh fan-out call. Each
session is an ordinary object created by its caller; nothing here is
process-wide.
"""

from __future__ import annotations

import logging
from typing import Callable

from multiglot.core.models import (
    Language,
    SessionStatus,
    Translation,
    UserSettings,
)
from multiglot.services.history import HistoryCache, normalize_input
from multiglot.services.translator import LanguageFailure, Translator


logger = logging.getLogger(__name__)

Listener = Callable[["TranslationSession"], None]


class TranslationSession:
    """
    One user's translation state machine.

        idle -> translating -> success | partial | error

    ``submit`` serves from history when it can; ``refresh`` always calls
    the service. Calls may overlap: each one takes a new generation and
    only the latest generation is allowed to touch visible state.

    Usage:
        session = TranslationSession(translator, history, user_settings)
        await session.submit("Hello world")
        if session.status == SessionStatus.ERROR:
            await session.retry()
    """

    def __init__(
        self,
        translator: Translator,
        history: HistoryCache,
        settings: UserSettings,
        on_change: Listener | None = None,
    ):
        self.translator = translator
        self.history = history
        self.settings = settings
        self._on_change = on_change

        self.status = SessionStatus.IDLE
        self.current: Translation | None = None
        self.error: str | None = None
        self.failures: list[LanguageFailure] = []
        self.last_text: str | None = None

        self._generation = 0

    @property
    def languages(self) -> list[Language]:
        return self.settings.languages

    @property
    def busy(self) -> bool:
        return self.status == SessionStatus.TRANSLATING

    # =========================================================================
    # Commands
    # =========================================================================

    async def submit(self, text: str) -> Translation | None:
        """
        Translate ``text``, reusing a cached translation when one exists.

        A cache hit does not refresh the entry's recency. Blank text is
        ignored.
        """
        return await self._run(text, use_cache=True)

    async def refresh(self, text: str) -> Translation | None:
        """Translate ``text`` from the service, overwriting any cached entry."""
        return await self._run(text, use_cache=False)

    async def retry(self) -> Translation | None:
        """Resubmit the text of the last call."""
        if self.last_text is None:
            return None
        return await self.submit(self.last_text)

    def reset(self) -> None:
        """Back to idle; any in-flight call becomes stale."""
        self._generation += 1
        self.current = None
        self.error = None
        self.failures = []
        self._set_status(SessionStatus.IDLE)

    def input_changed(self, text: str) -> None:
        """Clearing the input returns the session to idle."""
        if not normalize_input(text) and self.status != SessionStatus.IDLE:
            self.reset()

    # =========================================================================
    # Internals
    # =========================================================================

    async def _run(self, text: str, use_cache: bool) -> Translation | None:
        text = normalize_input(text)
        if not text:
            return None

        self._generation += 1
        generation = self._generation
        self.last_text = text

        if use_cache:
            cached = self.history.lookup(text)
            if cached is not None:
                logger.info(f"History hit for input ({len(text)} chars)")
                self.current = cached.translation
                self.error = None
                self.failures = []
                self._set_status(SessionStatus.SUCCESS)
                return self.current

        self.current = None
        self.error = None
        self.failures = []
        self._set_status(SessionStatus.TRANSLATING)

        result = await self.translator.translate_all(
            self.settings.api_key,
            text,
            self.languages,
            self.settings.translation_prompt or None,
        )

        if generation != self._generation:
            logger.debug(f"Ignoring superseded translation (generation {generation})")
            return None

        if not result.success:
            self.error = result.error
            self._set_status(SessionStatus.ERROR)
            return None

        translation = Translation(
            input=text,
            results=result.translations,
            source=result.source,
            alternate_sources=result.alternate_sources,
        )
        self.failures = result.failures

        if result.translations:
            try:
                translation = self.history.insert(translation).translation
            except Exception:
                # The translation is still shown, just not remembered
                logger.exception("Failed to save translation to history")
            self.current = translation
            self._set_status(SessionStatus.PARTIAL if result.failures else SessionStatus.SUCCESS)
            return translation

        if result.failures:
            self.error = result.failures[0].message
            self._set_status(SessionStatus.ERROR)
            return None

        # Every target was the source language
        self.current = translation
        self._set_status(SessionStatus.SUCCESS)
        return translation

    def _set_status(self, status: SessionStatus) -> None:
        self.status = status
        if self._on_change is not None:
            self._on_change(self)
