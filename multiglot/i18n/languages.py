"""
Language names and the default target list.

Any BCP-47-ish code can be configured as a target; the names here are only
used to fill in a display name when the user gives a bare code.
"""

from __future__ import annotations


# Human-readable names
LANGUAGE_NAMES: dict[str, str] = {
    # Western Europe
    "en": "English",
    "ca": "Catalan",
    "es": "Spanish",
    "fr": "French",
    "pt": "Portuguese",
    "it": "Italian",
    "de": "German",
    "nl": "Dutch",
    "eu": "Basque",
    "gl": "Galician",
    # Northern / Eastern Europe
    "sv": "Swedish",
    "no": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
    "pl": "Polish",
    "cs": "Czech",
    "uk": "Ukrainian",
    "ru": "Russian",
    "el": "Greek",
    "ro": "Romanian",
    # Asia
    "zh": "Chinese (Simplified)",
    "zh-tw": "Chinese (Traditional)",
    "ja": "Japanese",
    "ko": "Korean",
    "hi": "Hindi",
    "vi": "Vietnamese",
    "th": "Thai",
    "id": "Indonesian",
    "tr": "Turkish",
    # RTL
    "ar": "Arabic",
    "he": "Hebrew",
    "fa": "Persian",
}


# Targets used until the user configures their own list (order matters)
DEFAULT_LANGUAGE_CODES: list[str] = ["en", "ca", "es", "fr", "pt"]


def normalize_language_code(code: str) -> str:
    """Normalize language code to standard form."""
    code = code.lower().strip().replace("_", "-")

    variants = {
        "english": "en",
        "catalan": "ca",
        "spanish": "es",
        "french": "fr",
        "portuguese": "pt",
        "italian": "it",
        "german": "de",
        "chinese": "zh",
        "japanese": "ja",
        "korean": "ko",
        "zh-hant": "zh-tw",
        "zh-hans": "zh",
    }

    return variants.get(code, code)


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def parse_language_spec(spec: str) -> tuple[str, str]:
    """
    Parse a ``code[:name]`` pair as typed on the command line.

    Examples:
        "es"          -> ("es", "Spanish")
        "es:Español"  -> ("es", "Español")
    """
    code, _, name = spec.partition(":")
    code = normalize_language_code(code)
    if not code:
        raise ValueError(f"Invalid language: {spec!r}")
    return code, name.strip() or get_language_name(code)
