"""Bounded retry with linear backoff and a single failover attempt."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from lcc.errors import RETRYABLE_LEDGER_ERRORS
from lcc.ledger.client import LedgerEndpoints

logger = structlog.get_logger()

T = TypeVar("T")


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    endpoints: LedgerEndpoints,
    *,
    max_attempts: int = 5,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "ledger",
) -> T:
    """Run ``operation`` retrying rate-limit and timeout failures.

    Attempt ``n`` that fails retryably waits ``n * base_delay`` before the next.
    When the last attempt still fails that way, the active endpoint switches to
    the fallback and one more attempt is made; its error propagates.
    Any other error propagates immediately.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except RETRYABLE_LEDGER_ERRORS as exc:
            if attempt == max_attempts:
                logger.warning("ledger_retries_exhausted", op=label, attempts=attempt, error=str(exc))
                break
            delay = base_delay * attempt
            logger.warning("ledger_retry", op=label, attempt=attempt, delay=delay, error=str(exc))
            await sleep(delay)

    endpoints.use_fallback()
    return await operation()
