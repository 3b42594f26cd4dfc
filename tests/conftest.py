"""
Shared fixtures: settings that ignore the environment, a scripted
transport standing in for the service, and canned service replies.
"""

from __future__ import annotations

import json

import pytest

from multiglot.config import Settings
from multiglot.core.models import Language
from multiglot.services.ai.client import RetryingClient
from multiglot.services.ai.transport import ServiceRequest
from multiglot.storage.local import InMemoryStore


class FakeTransport:
    """
    Replays scripted outcomes in order; the last one repeats.

    An outcome is either reply text or an exception to raise.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[tuple[ServiceRequest, str]] = []

    async def send(self, request: ServiceRequest, credential: str) -> str:
        self.requests.append((request, credential))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every delay (seconds)."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_reply(*entries: dict, source: str = "en", alternate_sources: list[str] | None = None) -> str:
    body = {"input": "Hello world", "source": source, "translations": list(entries)}
    if alternate_sources is not None:
        body["alternateSources"] = alternate_sources
    return json.dumps(body)


def entry(code: str, text: str = "", source_language: bool = False) -> dict:
    meanings = [] if source_language else [
        {"sense": "greeting", "options": [{"text": text or f"{code}-text", "explanation": "common"}]}
    ]
    return {"languageCode": code, "sourceLanguage": source_language, "meanings": meanings}


@pytest.fixture
def settings():
    """Settings with defaults only, unaffected by env or .env."""
    return Settings(
        _env_file=None,
        anthropic_api_key="",
        max_retries=3,
        initial_retry_delay_ms=1000,
        debounce_ms=500,
    )


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def make_client(settings, sleep):
    def factory(*outcomes) -> tuple[RetryingClient, FakeTransport]:
        transport = FakeTransport(*outcomes)
        return RetryingClient(transport=transport, settings=settings, sleep=sleep), transport

    return factory


@pytest.fixture
def spanish():
    return Language(code="es", name="Spanish")


@pytest.fixture
def french():
    return Language(code="fr", name="French")


@pytest.fixture
def english():
    return Language(code="en", name="English")


class FailingStore(InMemoryStore):
    """In-memory store whose writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail = False

    def set_raw(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().set_raw(key, value)
