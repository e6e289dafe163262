"""
Tests for the sliding-window rate limiter.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import RedisError

from edutrack.core import rate_limit
from edutrack.core.rate_limit import RateLimitExceeded, check_rate_limit, enforce_rate_limit


@pytest.fixture(autouse=True)
def clear_memory_store():
    rate_limit._memory_store.clear()
    yield
    rate_limit._memory_store.clear()


@pytest.mark.asyncio
async def test_memory_fallback_blocks_after_limit():
    """Test that the in-process store is used when Redis is not connected."""
    with patch("edutrack.core.rate_limit.get_redis", return_value=None):
        results = [await check_rate_limit("rate_limit:login:1.2.3.4", 3, 60) for _ in range(4)]

    assert results == [True, True, True, False]


@pytest.mark.asyncio
async def test_keys_are_independent():
    with patch("edutrack.core.rate_limit.get_redis", return_value=None):
        assert await check_rate_limit("a", 1, 60)
        assert await check_rate_limit("b", 1, 60)
        assert not await check_rate_limit("a", 1, 60)


@pytest.mark.asyncio
async def test_redis_window_count():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 5, 1, True])
    client = MagicMock()
    client.pipeline.return_value = pipe

    with patch("edutrack.core.rate_limit.get_redis", return_value=client):
        assert await check_rate_limit("key", 5, 60) is False
        assert await check_rate_limit("key", 6, 60) is True


@pytest.mark.asyncio
async def test_redis_error_falls_back_to_memory():
    pipe = MagicMock()
    pipe.execute = AsyncMock(side_effect=RedisError("connection lost"))
    client = MagicMock()
    client.pipeline.return_value = pipe

    with patch("edutrack.core.rate_limit.get_redis", return_value=client):
        assert await check_rate_limit("key", 1, 60) is True

    assert "key" in rate_limit._memory_store


@pytest.mark.asyncio
async def test_enforce_raises_429():
    with patch("edutrack.core.rate_limit.get_redis", return_value=None):
        await enforce_rate_limit("login", limit=1, window_seconds=30)

        with pytest.raises(RateLimitExceeded) as exc_info:
            await enforce_rate_limit("login", limit=1, window_seconds=30)

    assert exc_info.value.status_code == 429
    assert exc_info.value.headers["Retry-After"] == "30"
