"""
Services - translation, completion checking, history and the session
that ties them together.
"""

from multiglot.services.completion import CompletionChecker, check_completion
from multiglot.services.history import HistoryCache
from multiglot.services.session import TranslationSession
from multiglot.services.settings import SettingsStore
from multiglot.services.translator import TranslateAllResult, Translator

__all__ = [
    "CompletionChecker",
    "check_completion",
    "HistoryCache",
    "TranslationSession",
    "SettingsStore",
    "TranslateAllResult",
    "Translator",
]
