"""
Test the per-user fixed-window rate limiter.
"""
import time

import pytest
from limits.aio.storage import MemoryStorage

from app.core import rate_limiting
from app.core.rate_limiting import RateLimitResult, UserRateLimiter


@pytest.fixture
def limiter():
    return UserRateLimiter(limit=10, window_seconds=60)


class TestUserRateLimiter:
    async def test_first_request_opens_window(self, limiter):
        before_ms = int(time.time() * 1000)
        result = await limiter.check("user-1")
        assert result.allowed is True
        assert result.remaining == 9
        assert result.limit == 10
        assert before_ms < result.reset_time <= before_ms + 61_000

    async def test_limit_reached(self, limiter):
        results = [await limiter.check("user-1") for _ in range(11)]
        assert [r.allowed for r in results] == [True] * 10 + [False]
        assert [r.remaining for r in results[:3]] == [9, 8, 7]
        assert results[9].remaining == 0
        assert results[10].remaining == 0

    async def test_users_are_independent(self, limiter):
        for _ in range(10):
            await limiter.check("user-1")
        assert (await limiter.check("user-1")).allowed is False
        assert (await limiter.check("user-2")).allowed is True

    async def test_clear_reopens_window(self, limiter):
        for _ in range(11):
            await limiter.check("user-1")
        await limiter.clear("user-1")

        result = await limiter.check("user-1")
        assert result.allowed is True
        assert result.remaining == 9

    async def test_reset(self, limiter):
        for _ in range(10):
            await limiter.check("user-1")
        await limiter.reset()
        assert (await limiter.check("user-1")).remaining == 9

    async def test_shared_storage(self):
        storage = MemoryStorage()
        first = UserRateLimiter(limit=2, window_seconds=60, storage=storage)
        second = UserRateLimiter(limit=2, window_seconds=60, storage=storage)

        await first.check("user-1")
        await second.check("user-1")
        assert (await first.check("user-1")).allowed is False

    async def test_memory_storage_is_healthy(self, limiter):
        assert limiter.backend == "memory"
        assert await limiter.healthy() is True


def test_result_headers():
    result = RateLimitResult(allowed=True, remaining=7, reset_time=1_700_000_060_000, limit=10)
    assert result.headers() == {
        "X-RateLimit-Limit": "10",
        "X-RateLimit-Remaining": "7",
        "X-RateLimit-Reset": "1700000060000",
    }


class UnreachableStorage:
    async def check(self):
        return False


class TestInitRateLimiter:
    @pytest.fixture(autouse=True)
    def restore_limiter(self):
        original = rate_limiting.limiter
        yield
        rate_limiting.limiter = original

    async def test_memory_backend_keeps_default(self, monkeypatch):
        monkeypatch.setattr(rate_limiting.settings, "rate_limit_backend", "memory")
        await rate_limiting.init_rate_limiter()
        assert rate_limiting.get_rate_limiter().backend == "memory"

    async def test_redis_backend(self, monkeypatch):
        uris = []

        def fake_storage_from_string(uri, **options):
            uris.append(uri)
            return MemoryStorage()

        monkeypatch.setattr(rate_limiting.settings, "rate_limit_backend", "redis")
        monkeypatch.setattr(rate_limiting.settings, "rate_limit_storage_url", "redis://cache:6379/3")
        monkeypatch.setattr(rate_limiting, "storage_from_string", fake_storage_from_string)

        await rate_limiting.init_rate_limiter()
        assert uris == ["async+redis://cache:6379/3"]
        assert rate_limiting.get_rate_limiter().backend == "redis"

        await rate_limiting.close_rate_limiter()
        assert rate_limiting.get_rate_limiter().backend == "memory"

    async def test_unreachable_redis_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setattr(rate_limiting.settings, "rate_limit_backend", "redis")
        monkeypatch.setattr(rate_limiting, "storage_from_string", lambda uri, **options: UnreachableStorage())

        await rate_limiting.init_rate_limiter()
        assert rate_limiting.get_rate_limiter().backend == "memory"
