"""
Core data models for multiglot.

These models represent translations as they flow from the service to the
history cache. Field names serialize to camelCase so persisted history and
settings stay readable by other clients of the same store.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from multiglot.core.utils import generate_id, now_ms
from multiglot.i18n.languages import DEFAULT_LANGUAGE_CODES, get_language_name


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Enums
# =============================================================================


class CompletionStatus(str, Enum):
    """Whether the text being typed looks finished."""

    IDLE = "idle"
    CHECKING = "checking"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    ERROR = "error"


class SessionStatus(str, Enum):
    """Visible state of a translation session."""

    IDLE = "idle"
    TRANSLATING = "translating"
    SUCCESS = "success"
    PARTIAL = "partial"  # Some requested languages came back empty
    ERROR = "error"


# =============================================================================
# Languages and translations
# =============================================================================


class Language(CamelModel):
    """A language the user wants to translate to."""

    code: str
    name: str

    @property
    def label(self) -> str:
        return f"{self.name} ({self.code})"


class TranslationOption(CamelModel):
    """One rendering of a meaning, with a note on usage or nuance."""

    text: str
    explanation: str = ""


class Meaning(CamelModel):
    """A distinct interpretation of the source text."""

    sense: str = ""
    options: list[TranslationOption] = Field(default_factory=list)


class LanguageTranslation(CamelModel):
    """Translation result for a single target language."""

    language: Language
    meanings: list[Meaning] = Field(default_factory=list)


class Translation(CamelModel):
    """
    The outcome of one fan-out call.

    ``results`` follows the order of the configured language list, not the
    order the service answered in.
    """

    input: str
    results: list[LanguageTranslation] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)
    source: str = ""
    alternate_sources: list[str] | None = None


class HistoryEntry(CamelModel):
    """A saved translation in history."""

    id: str = Field(default_factory=lambda: generate_id("hist"))
    input: str
    translation: Translation
    created_at: int = Field(default_factory=now_ms)


# =============================================================================
# Service payloads
# =============================================================================


class TranslationEntry(CamelModel):
    """One language entry as returned by the translation service."""

    language_code: str
    source_language: bool = False
    meanings: list[Meaning] | None = None


class TranslationResponse(CamelModel):
    """
    Envelope of a fan-out translation reply.

    Entries stay raw here and are validated one by one, so a single
    malformed language does not sink the others.
    """

    input: str | None = None
    source: str | None = None
    alternate_sources: list[str] | None = None
    translations: list[dict[str, Any]]


class CompletionResult(CamelModel):
    """Reply of a completion check: complete, incomplete or error."""

    status: CompletionStatus
    error: str | None = None


# =============================================================================
# User settings
# =============================================================================


def default_languages() -> list[Language]:
    return [Language(code=code, name=get_language_name(code)) for code in DEFAULT_LANGUAGE_CODES]


class UserSettings(CamelModel):
    """
    Per-user settings held in the key-value store.

    ``languages`` order defines the order of translation results.
    Empty prompts mean "use the built-in prompt".
    """

    api_key: str = ""
    languages: list[Language] = Field(default_factory=default_languages)
    translation_prompt: str = ""
    completion_prompt: str = ""
