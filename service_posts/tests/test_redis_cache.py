"""
Unit tests for the Redis cache adapter.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from shared.errors import CacheError
from service_posts.app.cache.base import CacheKeys, CacheStatus
from service_posts.app.cache.redis_cache import RedisCache


class TestRedisCache:
    """Test cases for RedisCache."""

    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.setex = AsyncMock(return_value=True)
        client.delete = AsyncMock(return_value=1)
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def cache(self, redis_client):
        cache = RedisCache("redis://localhost:6379/0")
        cache.redis = redis_client
        return cache

    @pytest.mark.asyncio
    async def test_get_hit(self, cache, redis_client):
        redis_client.get.return_value = '{"id": "p1"}'

        result = await cache.get(CacheKeys.post("p1"))

        assert result.status is CacheStatus.HIT
        assert result.value == '{"id": "p1"}'
        redis_client.get.assert_awaited_once_with("post:p1")

    @pytest.mark.asyncio
    async def test_get_miss(self, cache):
        result = await cache.get(CacheKeys.ALL_POSTS)

        assert result.status is CacheStatus.MISS
        assert result.ok and not result.hit

    @pytest.mark.asyncio
    async def test_get_connection_error(self, cache, redis_client):
        """Connection failures are reported, not raised."""
        redis_client.get.side_effect = RedisConnectionError("Connection refused")

        result = await cache.get("posts")

        assert result.status is CacheStatus.UNAVAILABLE
        assert "Connection refused" in result.error
        assert not result.ok

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, cache, redis_client):
        result = await cache.set_with_ttl("user:alice:posts", "[]", 300)

        assert result.status is CacheStatus.OK
        redis_client.setex.assert_awaited_once_with("user:alice:posts", 300, "[]")

    @pytest.mark.asyncio
    async def test_set_timeout(self, cache, redis_client):
        redis_client.setex.side_effect = RedisTimeoutError("Timeout reading from socket")

        result = await cache.set_with_ttl("posts", "[]", 300)

        assert result.status is CacheStatus.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_delete_many(self, cache, redis_client):
        result = await cache.delete("posts", "user:alice:posts")

        assert result.status is CacheStatus.OK
        redis_client.delete.assert_awaited_once_with("posts", "user:alice:posts")

    @pytest.mark.asyncio
    async def test_delete_nothing(self, cache, redis_client):
        result = await cache.delete()

        assert result.status is CacheStatus.OK
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_os_error(self, cache, redis_client):
        redis_client.delete.side_effect = OSError("Network unreachable")

        result = await cache.delete("posts")

        assert result.status is CacheStatus.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_not_started(self):
        """Calls before start() report the cache as unavailable."""
        cache = RedisCache("redis://localhost:6379/0")

        assert (await cache.get("posts")).status is CacheStatus.UNAVAILABLE
        assert (await cache.set_with_ttl("posts", "[]", 1)).status is CacheStatus.UNAVAILABLE
        assert (await cache.delete("posts")).status is CacheStatus.UNAVAILABLE
        assert await cache.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check(self, cache, redis_client):
        assert await cache.health_check() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await cache.health_check() is False

    @pytest.mark.asyncio
    async def test_stop_closes_client(self, cache, redis_client):
        await cache.stop()

        redis_client.aclose.assert_awaited_once()
        assert cache.redis is None


class TestRedisCacheStart:
    """Startup behaviour when Redis is or is not reachable."""

    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.ping = AsyncMock(return_value=True)
        return client

    @pytest.mark.asyncio
    async def test_start_success(self, redis_client):
        cache = RedisCache("redis://cache:6379/0")

        with patch("service_posts.app.cache.redis_cache.redis.from_url", return_value=redis_client) as from_url:
            await cache.start()

        assert cache.redis is redis_client
        assert from_url.call_args.args == ("redis://cache:6379/0",)
        assert from_url.call_args.kwargs["decode_responses"] is True

    @pytest.mark.asyncio
    async def test_start_unreachable_optional(self, redis_client):
        """An optional cache starts even when Redis is down."""
        redis_client.ping.side_effect = RedisConnectionError("Connection refused")
        cache = RedisCache("redis://cache:6379/0")

        with patch("service_posts.app.cache.redis_cache.redis.from_url", return_value=redis_client):
            await cache.start()

        assert cache.redis is redis_client

    @pytest.mark.asyncio
    async def test_start_unreachable_required(self, redis_client):
        """A required cache refuses to start without Redis."""
        redis_client.ping.side_effect = RedisConnectionError("Connection refused")
        cache = RedisCache("redis://cache:6379/0", required=True)

        with patch("service_posts.app.cache.redis_cache.redis.from_url", return_value=redis_client):
            with pytest.raises(CacheError) as exc_info:
                await cache.start()

        assert exc_info.value.code == "CACHE_ERROR"
