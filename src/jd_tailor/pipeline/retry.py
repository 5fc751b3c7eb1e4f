"""Bounded retry with jittered exponential backoff for gateway calls."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

from jd_tailor.clients.errors import is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_DELAY_MS = 30_000


class wait_jittered_doubling(wait_base):
    """First wait is the initial delay; each later one doubles it with +/-15% jitter.

    Stateful, so build a fresh instance per retried call.
    """

    def __init__(self, initial: float, cap: float, rng: random.Random | None = None):
        self.cap = cap
        self._next = min(initial, cap)
        self._rng = rng or random.Random()

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self._next
        self._next = min(delay * 2 * self._rng.uniform(0.85, 1.15), self.cap)
        return delay


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay_ms: int = 1000,
    *,
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
    on_retry: Callable[[int, float, BaseException], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rng: random.Random | None = None,
) -> T:
    """Run ``operation``, retrying transient gateway errors.

    Non-transient errors propagate after the first attempt; once
    ``max_attempts`` is used up the last error propagates.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def _before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep
        logger.warning(
            "Transient gateway error (%s); retrying in %.1fs (attempt %d/%d, waited %.1fs so far)",
            error,
            delay,
            retry_state.attempt_number,
            max_attempts,
            retry_state.idle_for,
        )
        if on_retry is not None:
            on_retry(retry_state.attempt_number, delay, error)

    async def _attempt() -> T:
        return await operation()

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_jittered_doubling(
            initial_delay_ms / 1000, max_delay_ms / 1000, rng=rng
        ),
        retry=retry_if_exception(is_transient),
        before_sleep=_before_sleep,
        sleep=sleep,
        reraise=True,
    )
    return await retrying(_attempt)
