"""
HTTP transport to the generative-language messages endpoint.

The transport knows the wire format and nothing about retries: it either
returns the text of the model's reply or raises. Failures carry only what
error classification needs (status code, retry-after header, message).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx

from multiglot.config import Settings, get_settings


@dataclass(frozen=True)
class ServiceRequest:
    """
    One logical request, already rendered.

    ``endpoint`` is a logical identifier used in logs ("translate_all",
    "check_completion"), not a URL.
    """

    endpoint: str
    system: str
    text: str
    model: str
    max_tokens: int
    target_count: int = 0


class TransportFailure(Exception):
    """The request did not produce a successful HTTP response."""

    def __init__(self, message: str, status: int | None = None, retry_after: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.retry_after = retry_after


class UnexpectedResponse(Exception):
    """A 2xx response whose body is not a usable text reply."""


class Transport(Protocol):
    async def send(self, request: ServiceRequest, credential: str) -> str:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class HttpxTransport:
    """
    Messages API over ``httpx.AsyncClient``.

    Usage:
        async with HttpxTransport() as transport:
            text = await transport.send(request, api_key)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)
        return self._client

    async def send(self, request: ServiceRequest, credential: str) -> str:
        payload = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": request.text}],
        }
        if request.system:
            payload["system"] = request.system
        headers = {
            "x-api-key": credential,
            "anthropic-version": self.settings.api_version,
            "content-type": "application/json",
        }

        try:
            response = await self.client.post(self.settings.messages_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise TransportFailure(
                _error_message(response),
                status=response.status_code,
                retry_after=response.headers.get("retry-after"),
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UnexpectedResponse("Response body is not JSON") from e

        content = body.get("content") if isinstance(body, dict) else None
        if not content or not isinstance(content, list):
            raise UnexpectedResponse("Response has no content")

        first = content[0]
        if not isinstance(first, dict) or first.get("type") != "text":
            raise UnexpectedResponse("Unexpected response format")

        return str(first.get("text", ""))

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
