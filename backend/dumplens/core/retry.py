"""Backoff for SQLite lock contention"""

import asyncio
import logging
import random
import sqlite3
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Messages SQLite uses for SQLITE_BUSY / SQLITE_LOCKED
BUSY_MARKERS = ("database is locked", "database table is locked", "database is busy")


def is_busy_error(error: BaseException) -> bool:
    """True when another connection holds the lock the statement needs."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in BUSY_MARKERS)


def backoff_delay(
    attempt: int, initial_delay: float, max_delay: float, jitter: bool = True
) -> float:
    delay = min(initial_delay * (2**attempt), max_delay)
    if jitter:
        delay = delay * (0.5 + random.random())
    return delay


async def call_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args,
    retries: int,
    initial_delay: float = 0.05,
    max_delay: float = 2.0,
    jitter: bool = True,
    should_retry: Callable[[BaseException], bool] = is_busy_error,
    **kwargs,
) -> T:
    """
    Await ``func`` again while it fails with a lock error.

    Args:
        func: Coroutine function to call
        retries: Extra attempts after the first one
        initial_delay: Seconds before the first retry, doubled on each retry
        max_delay: Upper bound for a single wait
        jitter: Scale each wait by a random factor in [0.5, 1.5)
        should_retry: Decides whether an error is worth another attempt

    Raises:
        The last error, or the first one ``should_retry`` rejects
    """
    attempt = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if attempt >= retries or not should_retry(e):
                if attempt:
                    logger.error(
                        "Giving up on %s after %d retries: %s",
                        func.__name__,
                        attempt,
                        e,
                    )
                raise
            delay = backoff_delay(attempt, initial_delay, max_delay, jitter)
            attempt += 1
            logger.warning(
                "Store busy in %s (retry %d/%d in %.2fs): %s",
                func.__name__,
                attempt,
                retries,
                delay,
                e,
            )
            await asyncio.sleep(delay)
