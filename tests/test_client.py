"""
Tests for the retrying client: classification, backoff and exhaustion.
"""

import logging
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from conftest import FakeTransport
from multiglot.core.errors import ErrorKind, ServiceError
from multiglot.services.ai.client import (
    RetryingClient,
    classify_failure,
    compute_delay_ms,
    parse_retry_after_ms,
)
from multiglot.services.ai.transport import ServiceRequest, TransportFailure, UnexpectedResponse


@pytest.fixture
def request_():
    return ServiceRequest(
        endpoint="translate_all",
        system="system prompt",
        text="Hello world",
        model="test-model",
        max_tokens=100,
        target_count=2,
    )


# =============================================================================
# Pure helpers
# =============================================================================


class TestParseRetryAfter:
    def test_seconds(self):
        assert parse_retry_after_ms("3") == 3000

    def test_fractional_seconds(self):
        assert parse_retry_after_ms("1.5") == 1500

    def test_negative_clamps_to_zero(self):
        assert parse_retry_after_ms("-4") == 0

    def test_http_date(self):
        now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now + timedelta(seconds=5), usegmt=True)
        assert parse_retry_after_ms(header, now=now) == 5000

    def test_http_date_in_past_clamps_to_zero(self):
        now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        header = format_datetime(now - timedelta(minutes=1), usegmt=True)
        assert parse_retry_after_ms(header, now=now) == 0

    def test_missing_or_garbage(self):
        assert parse_retry_after_ms(None) is None
        assert parse_retry_after_ms("") is None
        assert parse_retry_after_ms("soon") is None


class TestComputeDelay:
    def test_exponential_without_hint(self):
        error = ServiceError(ErrorKind.RATE_LIMITED, "Rate limit exceeded")
        assert [compute_delay_ms(error, n) for n in (1, 2, 3)] == [1000, 2000, 4000]

    def test_rate_limit_hint_wins(self):
        error = ServiceError(ErrorKind.RATE_LIMITED, "Rate limit exceeded", retry_after_ms=2500)
        assert compute_delay_ms(error, 3) == 2500

    def test_server_errors_ignore_hint(self):
        error = ServiceError(ErrorKind.TRANSPORT_OR_SERVER, "API error", retry_after_ms=9000)
        assert compute_delay_ms(error, 2) == 2000


class TestClassifyFailure:
    def test_auth(self):
        error = classify_failure(TransportFailure("bad key", status=401))
        assert error.kind == ErrorKind.AUTH
        assert not error.retryable

    def test_rate_limited_reads_hint(self):
        error = classify_failure(TransportFailure("slow down", status=429, retry_after="2"))
        assert error.kind == ErrorKind.RATE_LIMITED
        assert error.retry_after_ms == 2000
        assert error.retryable

    def test_server_error_is_retryable(self):
        error = classify_failure(TransportFailure("overloaded", status=529))
        assert error.kind == ErrorKind.TRANSPORT_OR_SERVER
        assert error.retryable
        assert error.message == "API error: overloaded"

    def test_network_error_is_retryable(self):
        error = classify_failure(TransportFailure("ConnectError: refused"))
        assert error.kind == ErrorKind.TRANSPORT_OR_SERVER
        assert error.retryable

    def test_bad_request_is_not_retried(self):
        error = classify_failure(TransportFailure("max_tokens too large", status=400))
        assert error.kind == ErrorKind.TRANSPORT_OR_SERVER
        assert not error.retryable


# =============================================================================
# Retry loop
# =============================================================================


class TestRetryingClient:
    @pytest.mark.asyncio
    async def test_success_first_try(self, make_client, sleep, request_):
        client, transport = make_client("ok")

        result = await client.call(request_, "test-key")

        assert result.ok
        assert result.value == "ok"
        assert len(transport.requests) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_rate_limit_backoff_then_exhausted(self, make_client, sleep, request_):
        client, transport = make_client(TransportFailure("rate limited", status=429))

        result = await client.call(request_, "test-key")

        assert not result.ok
        assert result.kind == ErrorKind.RATE_LIMIT_EXHAUSTED
        assert result.message == "Rate limit exceeded, retries exhausted"
        assert len(transport.requests) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_rate_limit_uses_retry_after(self, make_client, sleep, request_):
        client, transport = make_client(
            TransportFailure("rate limited", status=429, retry_after="7"),
            "ok",
        )

        result = await client.call(request_, "test-key")

        assert result.ok
        assert len(transport.requests) == 2
        assert sleep.delays == [7.0]

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self, make_client, sleep, request_):
        client, transport = make_client(TransportFailure("invalid x-api-key", status=401))

        result = await client.call(request_, "bad-key")

        assert result.kind == ErrorKind.AUTH
        assert result.message == "Invalid API key"
        assert len(transport.requests) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_malformed_response_not_retried(self, make_client, sleep, request_):
        client, transport = make_client(UnexpectedResponse("Unexpected response format"))

        result = await client.call(request_, "test-key")

        assert result.kind == ErrorKind.MALFORMED_RESPONSE
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_recovers(self, make_client, sleep, request_):
        client, transport = make_client(TransportFailure("overloaded", status=503), "ok")

        result = await client.call(request_, "test-key")

        assert result.ok
        assert len(transport.requests) == 2
        assert sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_server_error_exhausted_is_terminal(self, make_client, sleep, request_):
        client, transport = make_client(TransportFailure("ReadTimeout: timed out"))

        result = await client.call(request_, "test-key")

        assert result.kind == ErrorKind.TRANSPORT_OR_SERVER
        assert result.message == "Network error: ReadTimeout: timed out"
        assert len(transport.requests) == 4

    @pytest.mark.asyncio
    async def test_unexpected_exception_propagates(self, make_client, request_):
        client, transport = make_client(RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await client.call(request_, "test-key")
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_max_retries_from_settings(self, settings, sleep, request_):
        transport = FakeTransport(TransportFailure("rate limited", status=429))
        client = RetryingClient(
            transport=transport,
            settings=settings.model_copy(update={"max_retries": 1}),
            sleep=sleep,
        )

        result = await client.call(request_, "test-key")

        assert result.kind == ErrorKind.RATE_LIMIT_EXHAUSTED
        assert len(transport.requests) == 2
        assert sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_logs_never_contain_secret_or_text(self, make_client, request_, caplog):
        client, _ = make_client(TransportFailure("rate limited", status=429), "ok")
        caplog.set_level(logging.INFO, logger="multiglot.api")

        await client.call(request_, "sk-secret-key")

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("Request: translate_all") for m in messages)
        assert any(m.startswith("Retry: translate_all") for m in messages)
        assert any(m.startswith("Response: translate_all") for m in messages)
        for record in caplog.records:
            assert "sk-secret-key" not in record.getMessage()
            assert "Hello world" not in record.getMessage()

        first = next(r for r in caplog.records if r.getMessage().startswith("Request"))
        assert first.api["attempt"] == 1
        assert first.api["targetCount"] == 2
        assert first.api["textLength"] == len("Hello world")


# =============================================================================
# Credential validation
# =============================================================================


class TestValidateCredential:
    @pytest.mark.asyncio
    async def test_blank_key(self, make_client):
        client, transport = make_client("ok")

        result = await client.validate_credential("  ")

        assert not result.valid
        assert result.error == "API key is required"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_valid_key(self, make_client):
        client, transport = make_client("ok")

        result = await client.validate_credential("test-key")

        assert result.valid
        assert transport.requests[0][0].max_tokens == 1

    @pytest.mark.asyncio
    async def test_invalid_key(self, make_client):
        client, _ = make_client(TransportFailure("invalid", status=401))

        result = await client.validate_credential("bad-key")

        assert not result.valid
        assert result.error == "Invalid API key"

    @pytest.mark.asyncio
    async def test_rate_limited_key_is_valid(self, make_client, sleep):
        client, transport = make_client(TransportFailure("slow", status=429))

        result = await client.validate_credential("test-key")

        assert result.valid
        assert len(transport.requests) == 1
        assert sleep.delays == []
