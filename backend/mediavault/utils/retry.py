"""Bounded retry for async operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    attempt: Callable[[], Awaitable[T]],
    is_retryable: Callable[[BaseException], bool],
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 1.0,
    max_delay: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``attempt`` until it succeeds, up to ``max_attempts`` times.

    Every call to ``attempt`` starts from scratch, so it must re-read any
    state it depends on. Only exceptions accepted by ``is_retryable`` lead
    to another attempt; anything else, and the last retryable failure once
    the budget is spent, propagates unchanged.

    Args:
        attempt: Zero-argument coroutine factory.
        is_retryable: Predicate on the raised exception.
        max_attempts: Total attempts, including the first.
        delay: Seconds to wait before the second attempt.
        backoff: Multiplier applied to the delay after each retry
            (1.0 keeps it fixed).
        max_delay: Upper bound on a single wait.
        sleep: Awaitable sleep, replaceable in tests.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    wait = delay
    for number in range(1, max_attempts + 1):
        try:
            return await attempt()
        except Exception as e:
            if number >= max_attempts or not is_retryable(e):
                raise
            pause = min(wait, max_delay) if max_delay is not None else wait
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %.1fs",
                number, max_attempts, e, pause,
            )
            await sleep(pause)
            wait *= backoff
    raise AssertionError("unreachable")
