"""
Cache adapter contract for Posts Service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CacheStatus(str, Enum):
    """Outcome of a single cache call."""
    HIT = "hit"
    MISS = "miss"
    OK = "ok"
    UNAVAILABLE = "unavailable"  # cache down, disconnected or timed out
    ERROR = "error"              # adapter raised something it should not have


@dataclass(frozen=True)
class CacheResult:
    """Result of a cache call; failures are reported, never raised."""
    status: CacheStatus
    value: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (CacheStatus.HIT, CacheStatus.MISS, CacheStatus.OK)

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT

    @classmethod
    def found(cls, value: str) -> "CacheResult":
        return cls(CacheStatus.HIT, value=value)

    @classmethod
    def missing(cls) -> "CacheResult":
        return cls(CacheStatus.MISS)

    @classmethod
    def done(cls) -> "CacheResult":
        return cls(CacheStatus.OK)

    @classmethod
    def unavailable(cls, error: str) -> "CacheResult":
        return cls(CacheStatus.UNAVAILABLE, error=error)

    @classmethod
    def failed(cls, error: str) -> "CacheResult":
        return cls(CacheStatus.ERROR, error=error)


class CacheKeys:
    """Cache key namespace for posts."""

    ALL_POSTS = "posts"

    @staticmethod
    def user_posts(username: str) -> str:
        return f"user:{username}:posts"

    @staticmethod
    def post(post_id: str) -> str:
        return f"post:{post_id}"


class PostCache(ABC):
    """Best-effort key-value cache with TTL."""

    @abstractmethod
    async def get(self, key: str) -> CacheResult:
        """Look up a key; ``HIT`` carries the stored string."""

    @abstractmethod
    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> CacheResult:
        """Store a value that expires after ``ttl_seconds``."""

    @abstractmethod
    async def delete(self, *keys: str) -> CacheResult:
        """Remove keys; absent keys are not an error."""

    async def start(self) -> None:
        """Open connections. No-op by default."""

    async def stop(self) -> None:
        """Close connections. No-op by default."""

    async def health_check(self) -> bool:
        return True
