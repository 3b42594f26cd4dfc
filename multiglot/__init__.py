"""
multiglot - translate one input into many languages at once.

Usage:
    from multiglot import (
        HistoryCache, InMemoryStore, SettingsStore, Translator, TranslationSession,
    )

    store = InMemoryStore()
    session = TranslationSession(
        Translator(),
        HistoryCache(store),
        SettingsStore(store).load(),
    )
    await session.submit("Hello world")
    for result in session.current.results:
        print(result.language.name, result.meanings[0].options[0].text)
"""

from multiglot.core import (
    CompletionStatus,
    HistoryEntry,
    Language,
    LanguageTranslation,
    SessionStatus,
    Translation,
    UserSettings,
)
from multiglot.services import (
    CompletionChecker,
    HistoryCache,
    SettingsStore,
    TranslateAllResult,
    TranslationSession,
    Translator,
)
from multiglot.services.ai import RetryingClient
from multiglot.storage import InMemoryStore, JsonFileStore

__version__ = "0.1.0"

__all__ = [
    "CompletionChecker",
    "CompletionStatus",
    "HistoryCache",
    "HistoryEntry",
    "InMemoryStore",
    "JsonFileStore",
    "Language",
    "LanguageTranslation",
    "RetryingClient",
    "SessionStatus",
    "SettingsStore",
    "TranslateAllResult",
    "Translation",
    "TranslationSession",
    "Translator",
    "UserSettings",
]
