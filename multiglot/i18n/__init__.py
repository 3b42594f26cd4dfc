"""
Language names and defaults.
"""

from multiglot.i18n.languages import (
    DEFAULT_LANGUAGE_CODES,
    LANGUAGE_NAMES,
    get_language_name,
    normalize_language_code,
    parse_language_spec,
)

__all__ = [
    "DEFAULT_LANGUAGE_CODES",
    "LANGUAGE_NAMES",
    "get_language_name",
    "normalize_language_code",
    "parse_language_spec",
]
