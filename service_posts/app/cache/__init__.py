from .base import CacheKeys, CacheResult, CacheStatus, PostCache
from .redis_cache import RedisCache

__all__ = ["CacheKeys", "CacheResult", "CacheStatus", "PostCache", "RedisCache"]
