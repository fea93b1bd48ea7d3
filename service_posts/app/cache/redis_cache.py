"""
Redis caching layer for Posts Service.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import CacheError
from shared.logging import get_logger
from .base import CacheResult, PostCache

# Connection-level failures count as "cache unavailable".
_UNAVAILABLE_ERRORS = (RedisError, OSError)


class RedisCache(PostCache):
    """Redis-backed post cache; every operation reports instead of raising."""

    def __init__(
        self,
        redis_url: str,
        *,
        required: bool = False,
        socket_timeout: float = 5.0,
    ):
        self.redis_url = redis_url
        self.required = required
        self.socket_timeout = socket_timeout
        self.logger = get_logger("posts.cache.redis")
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Start the Redis cache.

        An unreachable Redis is tolerated unless the cache is required: the
        client is kept so later calls can succeed once Redis comes back.
        """
        self.redis = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=self.socket_timeout,
            socket_timeout=self.socket_timeout,
            retry_on_timeout=True,
            health_check_interval=30
        )

        try:
            await self.redis.ping()
        except _UNAVAILABLE_ERRORS as e:
            if self.required:
                self.logger.error("Failed to start Redis cache", error=str(e))
                raise CacheError("Redis cache unavailable", details={"error": str(e)}) from e
            self.logger.warning("Redis not available, continuing without cache", error=str(e))
            return

        self.logger.info("Redis cache started")

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def get(self, key: str) -> CacheResult:
        if self.redis is None:
            return CacheResult.unavailable("redis client not started")
        try:
            value = await self.redis.get(key)
        except _UNAVAILABLE_ERRORS as e:
            return CacheResult.unavailable(str(e))

        if value is None:
            return CacheResult.missing()
        return CacheResult.found(value)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> CacheResult:
        if self.redis is None:
            return CacheResult.unavailable("redis client not started")
        try:
            await self.redis.setex(key, ttl_seconds, value)
        except _UNAVAILABLE_ERRORS as e:
            return CacheResult.unavailable(str(e))
        return CacheResult.done()

    async def delete(self, *keys: str) -> CacheResult:
        if self.redis is None:
            return CacheResult.unavailable("redis client not started")
        if not keys:
            return CacheResult.done()
        try:
            await self.redis.delete(*keys)
        except _UNAVAILABLE_ERRORS as e:
            return CacheResult.unavailable(str(e))
        return CacheResult.done()

    async def health_check(self) -> bool:
        """Check Redis health."""
        if self.redis is None:
            return False
        try:
            await self.redis.ping()
            return True
        except _UNAVAILABLE_ERRORS:
            return False
