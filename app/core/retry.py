"""
Retry helper for calls to external services.
"""
import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_jitter: float = 1.0,
    retry_if: Optional[Callable[[Exception], bool]] = None,
) -> T:
    """
    Await ``operation`` until it succeeds or the retries are used up.

    After failed attempt ``n`` (starting at 0) the helper sleeps
    ``base_delay * 2 ** n`` seconds plus up to ``max_jitter`` seconds of
    random jitter. Every exception is retried unless ``retry_if`` is given
    and returns False for it, in which case the exception propagates at once.

    Args:
        operation: Zero-argument coroutine factory to call
        max_retries: Number of retries after the first attempt
        base_delay: Delay before the first retry, in seconds
        max_jitter: Upper bound of the random delay added to each backoff
        retry_if: Optional predicate deciding whether an exception is retryable

    Returns:
        The operation's result
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= max_retries or (retry_if is not None and not retry_if(e)):
                raise

            delay = base_delay * (2 ** attempt) + random.uniform(0, max_jitter)
            logger.warning(
                "Attempt failed, retrying",
                attempt=attempt + 1,
                max_retries=max_retries,
                delay=round(delay, 3),
                error=str(e),
            )
            await asyncio.sleep(delay)
            attempt += 1
