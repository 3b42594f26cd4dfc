"""
Fan-out translation.

One request names every target language; the reply is mapped back onto
the caller's language list so results always come out in settings order,
whatever order the service answered in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from multiglot.config import Settings, get_settings
from multiglot.core.errors import (
    INVALID_FORMAT,
    NO_TEXT_TO_TRANSLATE,
    PARSE_FAILED,
    TRANSLATE_FAILED,
    ErrorKind,
)
from multiglot.core.models import (
    Language,
    LanguageTranslation,
    TranslationEntry,
    TranslationResponse,
)
from multiglot.services.ai.apilog import api_error, api_response
from multiglot.services.ai.client import RetryingClient
from multiglot.services.ai.parsing import ResponseParseError, parse_json_object
from multiglot.services.ai.prompts import build_translation_prompt
from multiglot.services.ai.transport import ServiceRequest


logger = logging.getLogger(__name__)

ENDPOINT = "translate_all"


@dataclass
class LanguageFailure:
    """A requested language that came back without a usable translation."""

    language: Language
    message: str


@dataclass
class TranslateAllResult:
    """
    Outcome of ``Translator.translate_all``.

    ``success`` is about the call as a whole. A successful call can still
    carry ``failures`` for individual languages; languages detected as the
    source are neither translations nor failures.
    """

    success: bool
    translations: list[LanguageTranslation] = field(default_factory=list)
    error: str | None = None
    kind: ErrorKind | None = None
    source: str = ""
    alternate_sources: list[str] | None = None
    failures: list[LanguageFailure] = field(default_factory=list)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> TranslateAllResult:
        return cls(success=False, error=message, kind=kind)


class Translator:
    """
    Translates text into every configured language with a single request.

    Usage:
        translator = Translator()
        result = await translator.translate_all(
            api_key,
            "Hello world",
            [Language(code="es", name="Spanish"), Language(code="fr", name="French")],
        )
        if result.success:
            for t in result.translations:
                print(t.language.code, t.meanings[0].options[0].text)
    """

    def __init__(
        self,
        client: RetryingClient | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or RetryingClient(settings=self.settings)

    def build_request(
        self,
        text: str,
        languages: list[Language],
        prompt_template: str | None = None,
    ) -> ServiceRequest:
        language_list = ", ".join(language.label for language in languages)
        return ServiceRequest(
            endpoint=ENDPOINT,
            system=build_translation_prompt(language_list, prompt_template),
            text=text,
            model=self.settings.translation_model,
            max_tokens=self.settings.translation_max_tokens,
            target_count=len(languages),
        )

    async def translate_all(
        self,
        credential: str,
        text: str,
        languages: list[Language],
        prompt_template: str | None = None,
    ) -> TranslateAllResult:
        """
        Translate ``text`` into ``languages``.

        Args:
            credential: API key
            text: Source text (language is detected by the service)
            languages: Targets, in display order
            prompt_template: Optional user prompt with a ``{{languages}}`` marker

        Returns:
            TranslateAllResult; never raises
        """
        text = text.strip()
        if not text:
            return TranslateAllResult.failed(ErrorKind.EMPTY_INPUT, NO_TEXT_TO_TRANSLATE)

        if not languages:
            return TranslateAllResult(success=True)

        request = self.build_request(text, languages, prompt_template)

        try:
            result = await self.client.call(request, credential)
        except Exception:
            logger.exception("Unexpected failure while translating")
            return TranslateAllResult.failed(ErrorKind.UNEXPECTED, TRANSLATE_FAILED)

        if not result.ok:
            return TranslateAllResult.failed(result.kind, result.message)

        return self.map_response(result.value, languages)

    def map_response(self, raw: str, languages: list[Language]) -> TranslateAllResult:
        """Turn the service's raw reply into ordered per-language results."""
        try:
            data = parse_json_object(raw)
        except ResponseParseError:
            api_error(ENDPOINT, PARSE_FAILED, targetCount=len(languages))
            return TranslateAllResult.failed(ErrorKind.MALFORMED_RESPONSE, PARSE_FAILED)

        try:
            response = TranslationResponse.model_validate(data)
        except ValidationError:
            api_error(ENDPOINT, INVALID_FORMAT, hasTranslations="translations" in data)
            return TranslateAllResult.failed(ErrorKind.MALFORMED_RESPONSE, INVALID_FORMAT)

        entries = _index_entries(response.translations)

        translations: list[LanguageTranslation] = []
        failures: list[LanguageFailure] = []
        skipped_source = 0

        for language in languages:
            entry = entries.get(language.code.strip().lower())
            if entry is None:
                failures.append(LanguageFailure(language, f"No translation returned for {language.name}"))
                continue
            if isinstance(entry, str):
                failures.append(LanguageFailure(language, entry))
                continue
            if entry.source_language:
                skipped_source += 1
                continue
            if not entry.meanings:
                failures.append(LanguageFailure(language, f"No translation returned for {language.name}"))
                continue
            translations.append(LanguageTranslation(language=language, meanings=entry.meanings))

        api_response(
            ENDPOINT,
            targetCount=len(languages),
            translationsCount=len(translations),
            sourceLanguageCount=skipped_source,
            failedCount=len(failures),
        )
        for failure in failures:
            logger.warning(f"{failure.message} ({failure.language.code})")

        return TranslateAllResult(
            success=True,
            translations=translations,
            source=response.source or "",
            alternate_sources=response.alternate_sources,
            failures=failures,
        )


def _index_entries(raw_entries: list[dict[str, Any]]) -> dict[str, TranslationEntry | str]:
    """
    Index entries by lower-cased language code.

    A code whose entry fails validation maps to an error message instead.
    The first entry for a code wins.
    """
    entries: dict[str, TranslationEntry | str] = {}
    for raw in raw_entries:
        code = str(raw.get("languageCode", raw.get("language_code", ""))).strip().lower()
        if not code or code in entries:
            continue
        try:
            entries[code] = TranslationEntry.model_validate(raw)
        except ValidationError:
            entries[code] = f"Invalid translation entry for {code}"
    return entries
