# recipebox/core/resilience.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError

log = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
) -> T:
    """
    Call ``fn`` up to ``max_retries`` times with exponential backoff.

    Errors classified as permanent (NO_RECIPE_FOUND, VALIDATION_ERROR) are
    re-raised on the spot. Anything else waits ``initial_delay * 2**attempt``
    seconds and tries again; the last error is re-raised once attempts run out.
    """
    attempts = max(1, int(max_retries))
    last_error: BaseException | None = None

    for attempt in range(attempts):
        try:
            return await fn()
        except ExtractionError as e:
            if not e.retryable:
                raise
            last_error = e
        except Exception as e:
            last_error = e

        if attempt == attempts - 1:
            break

        delay = initial_delay * (2**attempt)
        log.warning(
            "retry attempt %d/%d after %.2fs: %s",
            attempt + 1,
            attempts,
            delay,
            last_error,
        )
        await asyncio.sleep(delay)

    assert last_error is not None
    raise last_error


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_s: float = config.TIMEOUT_AI_S,
    message: str = "Request timeout",
) -> T:
    # wait_for cancels the loser; whatever it would have returned is dropped
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise ExtractionError(message, ErrorCode.TIMEOUT, cause=e) from e
