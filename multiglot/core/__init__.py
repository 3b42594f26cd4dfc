"""
Core module - data models, errors and shared utilities.

This module contains:
- models: Translation data model (Language, Translation, HistoryEntry, ...)
- errors: Error taxonomy and Ok/Err result shapes
- utils: Shared utility functions
"""

from multiglot.core.models import (
    CompletionResult,
    CompletionStatus,
    HistoryEntry,
    Language,
    LanguageTranslation,
    Meaning,
    SessionStatus,
    Translation,
    TranslationOption,
    UserSettings,
)
from multiglot.core.errors import Err, ErrorKind, Ok, ServiceError
from multiglot.core.utils import generate_id, now_ms, utc_now

__all__ = [
    # Models
    "CompletionResult",
    "CompletionStatus",
    "HistoryEntry",
    "Language",
    "LanguageTranslation",
    "Meaning",
    "SessionStatus",
    "Translation",
    "TranslationOption",
    "UserSettings",
    # Errors
    "Err",
    "ErrorKind",
    "Ok",
    "ServiceError",
    # Utils
    "generate_id",
    "now_ms",
    "utc_now",
]
