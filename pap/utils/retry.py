"""Async retry decorator with exponential backoff and jitter.

Usage:
    @with_retry(max_attempts=3, retry_on=(httpx.TransportError,))
    async def fetch_data():
        return await client.get("/pap/claims.json")
"""

import asyncio
import logging
import random
from functools import wraps
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    max_attempts: int = 3,
    initial_delay: float = 0.5,
    max_delay: float = 4.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    reraise_on: Tuple[Type[Exception], ...] = (),
):
    """Retry a coroutine function with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (including the first try)
        initial_delay: Delay in seconds before the first retry
        max_delay: Cap on a single delay
        exponential_base: Multiplier applied per retry
        jitter: Randomise each delay between 50% and 150%
        retry_on: Exception types that trigger a retry
        reraise_on: Exception types that abort immediately

    Callers wrap the decorated call in their own timeout, so the total
    time spent here is bounded from outside as well.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except reraise_on:
                    raise
                except retry_on as exc:
                    attempt += 1
                    if attempt >= max_attempts:
                        logger.warning(
                            "Max retries (%d) exceeded for %s: %s",
                            max_attempts,
                            getattr(func, "__name__", "unknown"),
                            exc,
                        )
                        raise

                    delay = min(initial_delay * (exponential_base ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()

                    logger.info(
                        "Retry %d/%d for %s after %.2fs: %s",
                        attempt,
                        max_attempts,
                        getattr(func, "__name__", "unknown"),
                        delay,
                        exc,
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
