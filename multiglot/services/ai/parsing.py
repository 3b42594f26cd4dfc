"""
Pull a JSON object out of model output.

Models sometimes wrap JSON in a markdown fence or add a sentence before
it, so we try the fence first and then the outermost brace span.
"""

from __future__ import annotations

import json
import re
from typing import Any


_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class ResponseParseError(ValueError):
    """Model output did not contain a JSON object."""


def extract_json_text(text: str) -> str:
    json_text = text.strip()

    fenced = _CODE_BLOCK.search(json_text)
    if fenced:
        json_text = fenced.group(1).strip()

    if not json_text.startswith("{"):
        match = _JSON_OBJECT.search(json_text)
        if match:
            json_text = match.group(0)

    return json_text


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Parse model output as a JSON object.

    Raises:
        ResponseParseError: if no JSON can be decoded, or it is not an object
    """
    try:
        data = json.loads(extract_json_text(text))
    except json.JSONDecodeError as e:
        raise ResponseParseError(str(e)) from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data
