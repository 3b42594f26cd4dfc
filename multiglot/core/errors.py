"""
Error taxonomy and result shapes.

The request layer never lets a service failure escape as an exception:
every outcome is resolved to ``Ok`` or ``Err``. ``ServiceError`` is only
raised inside the retry loop so tenacity can decide what to retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union


T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a failed request."""

    AUTH = "auth"  # Invalid credential, terminal
    RATE_LIMITED = "rate_limited"  # Retryable
    RATE_LIMIT_EXHAUSTED = "rate_limit_exhausted"  # Terminal, after retries
    MALFORMED_RESPONSE = "malformed_response"  # Terminal
    TRANSPORT_OR_SERVER = "transport_or_server"  # Retryable, then terminal
    EMPTY_INPUT = "empty_input"  # Rejected before any call
    UNEXPECTED = "unexpected"


RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.TRANSPORT_OR_SERVER})


# User-facing messages
INVALID_API_KEY = "Invalid API key"
RATE_LIMIT_EXHAUSTED = "Rate limit exceeded, retries exhausted"
NO_TEXT_TO_TRANSLATE = "No text to translate"
PARSE_FAILED = "Failed to parse translation response"
INVALID_FORMAT = "Invalid response format"
TRANSLATE_FAILED = "Failed to translate"


class ServiceError(Exception):
    """A classified failure of a single attempt."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status: int | None = None,
        retry_after_ms: int | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.retry_after_ms = retry_after_ms
        self.retryable = kind in RETRYABLE_KINDS if retryable is None else retryable

    def __repr__(self) -> str:
        return f"<ServiceError(kind={self.kind.value}, status={self.status}, message={self.message!r})>"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    status: int | None = None

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, error: ServiceError) -> Err:
        return cls(kind=error.kind, message=error.message, status=error.status)


Result = Union[Ok[Any], Err]
