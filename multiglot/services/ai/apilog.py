"""
Structured log records for calls to the translation service.

Every record carries a context dict both as ``record.api`` (for handlers
that ship structured data) and rendered into the message. Callers pass
only counts and lengths: never the credential, never the input text.
"""

from __future__ import annotations

import logging
from typing import Any


logger = logging.getLogger("multiglot.api")


def _format(data: dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in data.items())


def _log(level: int, message: str, data: dict[str, Any]) -> None:
    if data:
        message = f"{message} {_format(data)}"
    logger.log(level, message, extra={"api": data})


def api_request(endpoint: str, **data: Any) -> None:
    _log(logging.INFO, f"Request: {endpoint}", data)


def api_response(endpoint: str, **data: Any) -> None:
    _log(logging.INFO, f"Response: {endpoint}", data)


def api_retry(endpoint: str, attempt: int, max_retries: int, delay_ms: int, reason: str) -> None:
    _log(
        logging.WARNING,
        f"Retry: {endpoint}",
        {"attempt": attempt, "maxRetries": max_retries, "delayMs": delay_ms, "reason": reason},
    )


def api_error(endpoint: str, error: str, **data: Any) -> None:
    _log(logging.ERROR, f"Error: {endpoint}", {"error": error, **data})
