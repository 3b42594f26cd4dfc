"""
System prompts for the translation service.

Prompts use ``{{placeholder}}`` markers so user-edited templates can be
stored verbatim in settings.
"""

from __future__ import annotations

import re


# =============================================================================
# Translation
# =============================================================================


DEFAULT_TRANSLATION_PROMPT = """You are a professional translator. The user will send a word, phrase or sentence.

1. Detect the language the text is written in (the source language). If the text is a valid term in several languages, list the others as alternate sources.
2. Translate the text into each of these target languages: {{languages}}.
3. For any target language that is the detected source language, set "sourceLanguage" to true and leave "meanings" empty.
4. If the text has several distinct meanings, give each one as a separate meaning with a short description of the sense written in the target language.
5. For each meaning, provide 1-3 translation options, each with a brief explanation in the target language of when to use it or its nuance."""


JSON_FORMAT_SUFFIX = """

Respond in JSON format:
{
  "input": "the original text",
  "source": "detected source language code",
  "alternateSources": ["other language codes where the input is valid"],
  "translations": [
    {
      "languageCode": "target language code",
      "sourceLanguage": false,
      "meanings": [
        {
          "sense": "description of this meaning",
          "options": [
            {"text": "translated text", "explanation": "usage or nuance"}
          ]
        }
      ]
    }
  ]
}

Only output the JSON, no other text."""


# =============================================================================
# Completion check
# =============================================================================


DEFAULT_COMPLETION_PROMPT = """You are a language detection assistant. Your task is to determine if the user has finished typing a complete thought, phrase, or sentence that is ready for translation.

Respond with ONLY "complete" or "incomplete" (no other text).

Consider it "complete" if:
- It's a complete sentence or phrase
- It's a standalone word or expression
- The user appears to have finished their thought

Consider it "incomplete" if:
- The text ends mid-word
- The sentence structure is clearly unfinished
- It looks like the user is still typing"""


# =============================================================================
# Rendering
# =============================================================================


_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render(template: str, **values: str) -> str:
    """Substitute ``{{name}}`` markers; unknown markers are left as-is."""
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def build_translation_prompt(language_list: str, template: str | None = None) -> str:
    """System prompt for a fan-out request naming every target language."""
    return render(template or DEFAULT_TRANSLATION_PROMPT, languages=language_list) + JSON_FORMAT_SUFFIX
