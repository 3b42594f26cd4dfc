"""
RetryingClient - resilient access to the translation service.

Wraps a Transport with error classification and bounded retries. Every
call resolves to ``Ok(text)`` or ``Err(kind, message)``; service failures
never escape as exceptions. Only a genuinely unexpected exception (a bug,
not a service failure) propagates, and the callers convert it at their
own boundary.

Retry policy:
    - AuthError and MalformedResponse are never retried.
    - RateLimited waits for the server's retry-after hint when present,
      otherwise 1s, 2s, 4s (doubling from ``initial_retry_delay_ms``).
    - TransportOrServerError uses the same doubling schedule.
    - At most ``max_retries`` retries (4 attempts with the defaults).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from multiglot.config import Settings, get_settings
from multiglot.core.errors import (
    INVALID_API_KEY,
    RATE_LIMIT_EXHAUSTED,
    Err,
    ErrorKind,
    Ok,
    ServiceError,
)
from multiglot.core.utils import utc_now
from multiglot.services.ai.apilog import api_error, api_request, api_response, api_retry
from multiglot.services.ai.transport import (
    HttpxTransport,
    ServiceRequest,
    Transport,
    TransportFailure,
    UnexpectedResponse,
)


Sleep = Callable[[float], Awaitable[Any]]

# Statuses worth another attempt besides 429
_RETRYABLE_STATUSES = frozenset({408, 409, 500, 502, 503, 504, 529})


# =============================================================================
# Pure helpers
# =============================================================================


def parse_retry_after_ms(value: str | None, now: datetime | None = None) -> int | None:
    """
    Parse a retry-after header into milliseconds.

    Accepts a plain count of seconds or an HTTP-date. Dates in the past
    clamp to 0. Returns None when the header is absent or unreadable.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        return max(0, int(float(value) * 1000))
    except (ValueError, OverflowError):
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or utc_now()
    return max(0, int((when - now).total_seconds() * 1000))


def compute_delay_ms(error: ServiceError, attempt: int, initial_delay_ms: int = 1000) -> int:
    """
    Delay before the next attempt.

    Args:
        error: Failure of the attempt that just finished
        attempt: 1-based number of that attempt
        initial_delay_ms: Base of the exponential schedule
    """
    if error.kind == ErrorKind.RATE_LIMITED and error.retry_after_ms is not None:
        return max(0, error.retry_after_ms)
    return initial_delay_ms * 2 ** (attempt - 1)


def classify_failure(failure: TransportFailure, now: datetime | None = None) -> ServiceError:
    """Map a transport failure onto the error taxonomy."""
    status = failure.status

    if status in (401, 403):
        return ServiceError(ErrorKind.AUTH, INVALID_API_KEY, status=status)

    if status == 429:
        return ServiceError(
            ErrorKind.RATE_LIMITED,
            "Rate limit exceeded",
            status=status,
            retry_after_ms=parse_retry_after_ms(failure.retry_after, now),
        )

    if status is None:
        return ServiceError(ErrorKind.TRANSPORT_OR_SERVER, f"Network error: {failure.message}")

    # Other 4xx are the request's fault; repeating it will not help
    return ServiceError(
        ErrorKind.TRANSPORT_OR_SERVER,
        f"API error: {failure.message}",
        status=status,
        retryable=status >= 500 or status in _RETRYABLE_STATUSES,
    )


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ServiceError) and exc.retryable


# =============================================================================
# Client
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None


class RetryingClient:
    """
    Sends one logical request to the service, retrying where it makes sense.

    Usage:
        client = RetryingClient()
        result = await client.call(request, api_key)
        if result.ok:
            print(result.value)
        else:
            print(result.kind, result.message)

    Args:
        transport: Wire implementation (defaults to HttpxTransport)
        settings: Retry limits and model names
        sleep: Awaitable sleep taking seconds; injectable for tests
    """

    def __init__(
        self,
        transport: Transport | None = None,
        settings: Settings | None = None,
        sleep: Sleep | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport or HttpxTransport(self.settings)
        self.max_retries = self.settings.max_retries
        self.initial_delay_ms = self.settings.initial_retry_delay_ms
        self._sleep = sleep or asyncio.sleep

    # =========================================================================
    # Calls
    # =========================================================================

    async def call(self, request: ServiceRequest, credential: str) -> Ok[str] | Err:
        """Send a request, retrying retryable failures; never raises ServiceError."""
        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self._wait,
            retry=retry_if_exception(_is_retryable),
            before_sleep=lambda state: self._log_retry(request, state),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    text = await self._attempt(request, credential, attempts)
        except ServiceError as error:
            return self._terminal(request, error, attempts)

        api_response(request.endpoint, attempts=attempts, responseLength=len(text))
        return Ok(text)

    async def validate_credential(self, credential: str) -> ValidationResult:
        """
        Check a key with one minimal request (no retries).

        A rate-limited key is still a valid key.
        """
        if not credential.strip():
            return ValidationResult(False, "API key is required")

        request = ServiceRequest(
            endpoint="validate_key",
            system="",
            text="Hi",
            model=self.settings.validation_model,
            max_tokens=1,
        )
        try:
            await self._attempt(request, credential, 1)
        except ServiceError as error:
            if error.kind == ErrorKind.RATE_LIMITED:
                return ValidationResult(True)
            api_error(request.endpoint, error.message, kind=error.kind.value, status=error.status)
            return ValidationResult(False, error.message)
        return ValidationResult(True)

    async def aclose(self) -> None:
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    # =========================================================================
    # Internals
    # =========================================================================

    async def _attempt(self, request: ServiceRequest, credential: str, attempt: int) -> str:
        api_request(
            request.endpoint,
            model=request.model,
            attempt=attempt,
            targetCount=request.target_count,
            textLength=len(request.text),
        )
        try:
            return await self.transport.send(request, credential)
        except TransportFailure as failure:
            raise classify_failure(failure) from failure
        except UnexpectedResponse as e:
            raise ServiceError(ErrorKind.MALFORMED_RESPONSE, str(e)) from e

    def _wait(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception()
        delay_ms = compute_delay_ms(error, retry_state.attempt_number, self.initial_delay_ms)
        return delay_ms / 1000

    def _log_retry(self, request: ServiceRequest, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay_ms = int(round(retry_state.next_action.sleep * 1000))
        api_retry(request.endpoint, retry_state.attempt_number, self.max_retries, delay_ms, error.message)

    def _terminal(self, request: ServiceRequest, error: ServiceError, attempts: int) -> Err:
        if error.kind == ErrorKind.RATE_LIMITED:
            api_error(request.endpoint, RATE_LIMIT_EXHAUSTED, attempts=attempts)
            return Err(ErrorKind.RATE_LIMIT_EXHAUSTED, RATE_LIMIT_EXHAUSTED, status=error.status)

        api_error(
            request.endpoint,
            error.message,
            kind=error.kind.value,
            status=error.status,
            attempts=attempts,
        )
        return Err.from_exception(error)
