"""
Per-user fixed-window rate limiting.

Each user gets a counter that opens with their first request and expires
``window_seconds`` later. Once ``limit`` requests have been counted inside the
window, further requests are refused until the window resets. Counting is done
by the ``limits`` fixed-window strategy; the in-memory storage only covers a
single process, so set ``RATE_LIMIT_BACKEND=redis`` to share windows between
workers.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from limits import RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage, Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of a rate limit check. ``reset_time`` is in epoch milliseconds."""

    allowed: bool
    remaining: int
    reset_time: int
    limit: int

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_time),
        }


class UserRateLimiter:
    """Fixed-window limit applied per key on top of a ``limits`` storage."""

    def __init__(
        self,
        limit: int = 10,
        window_seconds: int = 60,
        storage: Optional[Storage] = None,
        backend: str = "memory",
    ):
        self.limit = limit
        self.item = RateLimitItemPerSecond(limit, window_seconds)
        self.storage = storage if storage is not None else MemoryStorage()
        self.backend = backend
        self._strategy = FixedWindowRateLimiter(self.storage)

    async def check(self, key: str) -> RateLimitResult:
        allowed = await self._strategy.hit(self.item, key)
        stats = await self._strategy.get_window_stats(self.item, key)
        return RateLimitResult(
            allowed=allowed,
            remaining=stats.remaining if allowed else 0,
            reset_time=int(stats.reset_time * 1000),
            limit=self.limit,
        )

    async def clear(self, key: str) -> None:
        """Drop the window for one key."""
        await self._strategy.clear(self.item, key)

    async def reset(self) -> None:
        """Forget every window."""
        await self.storage.reset()

    async def healthy(self) -> bool:
        return await self.storage.check()


def _async_storage_uri(url: str) -> str:
    return url if url.startswith("async+") else f"async+{url}"


limiter = UserRateLimiter(
    limit=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)


async def init_rate_limiter() -> None:
    """Switch to the Redis backend when configured, falling back to memory."""
    global limiter

    if not settings.rate_limit_enabled or settings.rate_limit_backend != "redis":
        logger.info("Rate limiter using in-memory store", backend="memory")
        return

    options = {"password": settings.redis_password} if settings.redis_password else {}
    try:
        storage = storage_from_string(_async_storage_uri(settings.rate_limit_storage_url), **options)
        if not await storage.check():
            raise ConnectionError("Redis storage did not respond")
    except Exception as e:
        logger.error("Failed to initialize Redis rate limiter, using in-memory store", error=str(e))
        return

    limiter = UserRateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        storage=storage,
        backend="redis",
    )
    logger.info("Rate limiter initialized with Redis backend")


async def close_rate_limiter() -> None:
    """Return to a fresh in-memory limiter."""
    global limiter

    if limiter.backend == "redis":
        logger.info("Rate limiter Redis storage released")
    limiter = UserRateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def get_rate_limiter() -> UserRateLimiter:
    """FastAPI dependency returning the active rate limiter."""
    return limiter
