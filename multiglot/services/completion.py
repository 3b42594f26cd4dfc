"""
Completion checking - "has the user finished typing?"

``check_completion`` asks the service once. ``CompletionChecker`` wraps it
for live input: it debounces updates, checks only the latest text and
drops answers that arrive for text that has since changed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from multiglot.config import Settings, get_settings
from multiglot.core.models import CompletionResult, CompletionStatus
from multiglot.services.ai.client import RetryingClient
from multiglot.services.ai.prompts import DEFAULT_COMPLETION_PROMPT
from multiglot.services.ai.transport import ServiceRequest


logger = logging.getLogger(__name__)

ENDPOINT = "check_completion"

CheckFn = Callable[[str, str, "str | None"], Awaitable[CompletionResult]]
Listener = Callable[[CompletionStatus, "str | None"], None]


# =============================================================================
# Single check
# =============================================================================


async def check_completion(
    client: RetryingClient,
    credential: str,
    text: str,
    custom_prompt: str | None = None,
) -> CompletionResult:
    """
    Ask the service whether ``text`` looks finished.

    Returns a result with status complete, incomplete or error; never raises.
    """
    request = ServiceRequest(
        endpoint=ENDPOINT,
        system=custom_prompt or DEFAULT_COMPLETION_PROMPT,
        text=text,
        model=client.settings.completion_model,
        max_tokens=client.settings.completion_max_tokens,
    )

    try:
        result = await client.call(request, credential)
    except Exception:
        logger.exception("Unexpected failure while checking completion")
        return CompletionResult(status=CompletionStatus.ERROR, error="Failed to check completion")

    if not result.ok:
        return CompletionResult(status=CompletionStatus.ERROR, error=result.message)

    answer = result.value.strip().strip(".\"'`").lower()
    # "incomplete" contains "complete", so test it first
    if answer.startswith("incomplete"):
        return CompletionResult(status=CompletionStatus.INCOMPLETE)
    if answer.startswith("complete"):
        return CompletionResult(status=CompletionStatus.COMPLETE)

    logger.warning(f"Unexpected completion answer ({len(answer)} chars)")
    return CompletionResult(status=CompletionStatus.ERROR, error="Unexpected completion response")


# =============================================================================
# Live checker
# =============================================================================


class CompletionChecker:
    """
    Debounced, cancellable completion status for text being typed.

    Every ``update`` bumps a generation counter and replaces the single
    pending timer. When the timer fires, one check runs; its answer is
    applied only if no newer update happened meanwhile.

    Usage:
        checker = CompletionChecker(client, on_change=render_badge)
        checker.update(text, api_key)      # on every keystroke
        ...
        checker.close()                    # on teardown

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        client: RetryingClient | None = None,
        debounce_ms: int | None = None,
        check: CheckFn | None = None,
        on_change: Listener | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.debounce_ms = settings.debounce_ms if debounce_ms is None else debounce_ms
        if check is None:
            client = client or RetryingClient(settings=settings)

            async def check(credential: str, text: str, custom_prompt: str | None) -> CompletionResult:
                return await check_completion(client, credential, text, custom_prompt)

        self._check = check
        self._on_change = on_change

        self.status = CompletionStatus.IDLE
        self.error: str | None = None

        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a timer is waiting or a check is running."""
        return self._timer is not None or bool(self._inflight)

    def update(self, text: str, credential: str, custom_prompt: str | None = None) -> None:
        """React to new input. Returns immediately."""
        if self._closed:
            return

        self._generation += 1
        self._cancel_timer()

        if not text.strip() or not credential:
            self._set(CompletionStatus.IDLE, None)
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.debounce_ms / 1000,
            self._fire,
            self._generation,
            text,
            credential,
            custom_prompt,
        )

    def close(self) -> None:
        """Cancel the timer and abandon in-flight checks; no further updates."""
        self._closed = True
        self._generation += 1
        self._cancel_timer()
        for task in list(self._inflight):
            task.cancel()
        self._inflight.clear()

    async def wait(self) -> None:
        """Wait for in-flight checks to settle."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # =========================================================================
    # Internals
    # =========================================================================

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int, text: str, credential: str, custom_prompt: str | None) -> None:
        self._timer = None
        if generation != self._generation or self._closed:
            return
        self._set(CompletionStatus.CHECKING, None)
        task = asyncio.ensure_future(self._run(generation, text, credential, custom_prompt))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, generation: int, text: str, credential: str, custom_prompt: str | None) -> None:
        try:
            result = await self._check(credential, text, custom_prompt)
        except Exception as e:
            logger.exception("Completion check failed")
            result = CompletionResult(status=CompletionStatus.ERROR, error=str(e) or "Completion check failed")

        if generation != self._generation or self._closed:
            logger.debug(f"Discarding stale completion result (generation {generation})")
            return

        if result.status == CompletionStatus.ERROR:
            self._set(CompletionStatus.ERROR, result.error)
        else:
            self._set(result.status, None)

    def _set(self, status: CompletionStatus, error: str | None) -> None:
        changed = status != self.status or error != self.error
        self.status = status
        self.error = error
        if changed and self._on_change is not None:
            self._on_change(status, error)
