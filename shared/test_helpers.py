"""
Test helper functions and doubles for fedipost.

The in-memory store and cache follow the adapter contracts closely enough to
stand in for DynamoDB and Redis; the fault adapters simulate the failure
modes the posts data path must survive.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional, Tuple

from shared.config import ServiceConfig, get_config
from shared.errors import StoreReadError, StoreWriteError
from service_posts.app.cache.base import CacheResult, PostCache
from service_posts.app.persistence.base import PostStore
from service_posts.app.posts.factory import actor_uri, isoformat_utc
from service_posts.app.posts.models import Post

TEST_BASE_URL = "http://testserver"


class InMemoryPostStore(PostStore):
    """Dict-backed store; returns results in insertion order."""

    def __init__(self):
        self.items: Dict[str, Dict[str, str]] = {}
        self.calls: List[Tuple[str, Any]] = []

    async def put(self, post: Post) -> None:
        self.calls.append(("put", post.id))
        if post.id in self.items:
            raise StoreWriteError(f"Post {post.id} already exists", details={"post_id": post.id})
        self.items[post.id] = post.to_item()

    async def get_by_key(self, post_id: str) -> Optional[Post]:
        self.calls.append(("get", post_id))
        item = self.items.get(post_id)
        return Post.from_dict(item) if item else None

    async def scan_all(self) -> List[Post]:
        self.calls.append(("scan", None))
        return [Post.from_dict(item) for item in self.items.values()]

    async def query_by_partition(self, username: str) -> List[Post]:
        self.calls.append(("query", username))
        return [Post.from_dict(item) for item in self.items.values() if item["username"] == username]

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


class FailingPostStore(PostStore):
    """Store whose every operation fails the way DynamoDB reports errors."""

    async def put(self, post: Post) -> None:
        raise StoreWriteError("ProvisionedThroughputExceededException", details={"post_id": post.id})

    async def get_by_key(self, post_id: str) -> Optional[Post]:
        raise StoreReadError("connection refused", details={"post_id": post_id})

    async def scan_all(self) -> List[Post]:
        raise StoreReadError("connection refused")

    async def query_by_partition(self, username: str) -> List[Post]:
        raise StoreReadError("connection refused")

    async def health_check(self) -> bool:
        return False


class InMemoryCache(PostCache):
    """Dict-backed cache that records TTLs instead of expiring entries."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.deleted: List[str] = []

    async def get(self, key: str) -> CacheResult:
        if key in self.data:
            return CacheResult.found(self.data[key])
        return CacheResult.missing()

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> CacheResult:
        self.data[key] = value
        self.ttls[key] = ttl_seconds
        return CacheResult.done()

    async def delete(self, *keys: str) -> CacheResult:
        for key in keys:
            self.deleted.append(key)
            self.data.pop(key, None)
            self.ttls.pop(key, None)
        return CacheResult.done()


class UnavailableCache(PostCache):
    """Cache that reports itself unreachable on every call."""

    def __init__(self):
        self.calls = 0

    async def get(self, key: str) -> CacheResult:
        self.calls += 1
        return CacheResult.unavailable("Connection refused")

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> CacheResult:
        self.calls += 1
        return CacheResult.unavailable("Connection refused")

    async def delete(self, *keys: str) -> CacheResult:
        self.calls += 1
        return CacheResult.unavailable("Connection refused")

    async def health_check(self) -> bool:
        return False


class ExplodingCache(PostCache):
    """Cache adapter that breaks its contract and raises on every call."""

    def __init__(self):
        self.calls = 0

    async def get(self, key: str) -> CacheResult:
        self.calls += 1
        raise RuntimeError("cache exploded on get")

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> CacheResult:
        self.calls += 1
        raise RuntimeError("cache exploded on set")

    async def delete(self, *keys: str) -> CacheResult:
        self.calls += 1
        raise RuntimeError("cache exploded on delete")


class PostFactory:
    """Factory for creating test posts."""

    def __init__(self, base_url: str = TEST_BASE_URL):
        self.base_url = base_url
        self.start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def create(
        self,
        post_id: str,
        username: str = "alice",
        content: str = "hello",
        created_at: Optional[str] = None,
        minutes: int = 0,
    ) -> Post:
        """Create a post ``minutes`` after the factory's start time."""
        return Post(
            id=post_id,
            username=username,
            content=content,
            created_at=created_at or isoformat_utc(self.start + timedelta(minutes=minutes)),
            attributed_to=actor_uri(self.base_url, username),
        )

    def create_timeline(self) -> List[Post]:
        """Interleaved posts from three users with distinct timestamps."""
        authors = ["alice", "bob", "carol"]
        return [
            self.create(str(i), username=authors[i % len(authors)], content=f"post {i}", minutes=i)
            for i in range(9)
        ]


def get_test_config(**overrides) -> ServiceConfig:
    """Service configuration pinned to test-friendly values."""
    settings: Dict[str, Any] = {
        "env": "test",
        "log_level": "warning",
        "base_url": TEST_BASE_URL,
        "enable_tracing": False,
    }
    settings.update(overrides)
    return get_config("posts", 8001, **settings)


post_factory = PostFactory()
