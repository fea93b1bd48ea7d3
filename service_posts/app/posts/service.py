"""
Posts service: read-through cache in front of the durable post store.

Reads try the cache first and fall back to the store on a miss or on any
cache failure, repopulating the entry afterwards. Writes go to the store
first; only after a successful put is the new post's own entry populated and
the two aggregate lists it belongs to (all posts, the author's posts)
invalidated. Cache failures are logged and counted but never reach the
caller. Store failures always do.
"""

import json
import time
from typing import Any, Awaitable, Callable, List, Optional, Type, TYPE_CHECKING

from shared.errors import StoreError, StoreReadError, StoreWriteError
from shared.logging import get_logger
from shared.tracing import get_tracer
from ..cache.base import CacheKeys, CacheResult, CacheStatus, PostCache
from ..persistence.base import PostStore
from .models import Post, newest_first, validate_post

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_POST_TTL = 3600
DEFAULT_LIST_TTL = 300


def serialize_posts(posts: List[Post]) -> str:
    return json.dumps([post.to_dict() for post in posts])


def deserialize_posts(payload: str) -> List[Post]:
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("cached post list is not a JSON array")
    return [Post.from_dict(item) for item in data]


def serialize_post(post: Post) -> str:
    return json.dumps(post.to_dict())


def deserialize_post(payload: str) -> Post:
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("cached post is not a JSON object")
    return Post.from_dict(data)


class PostsService:
    """Create and list posts with best-effort caching."""

    def __init__(
        self,
        store: PostStore,
        cache: Optional[PostCache] = None,
        *,
        metrics: Optional["MetricsCollector"] = None,
        post_ttl: int = DEFAULT_POST_TTL,
        list_ttl: int = DEFAULT_LIST_TTL,
    ):
        self.store = store
        self.cache = cache
        self.metrics = metrics
        self.post_ttl = post_ttl
        self.list_ttl = list_ttl
        self.logger = get_logger("posts.service")
        self.tracer = get_tracer("posts.service")

    async def create_post(self, post: Post) -> Post:
        """Persist a new post, then refresh the cache entries it affects."""
        validate_post(post)

        with self.tracer.start_as_current_span("posts.create_post") as span:
            span.set_attribute("post.id", post.id)
            span.set_attribute("post.username", post.username)

            await self._store_call("put", StoreWriteError, self.store.put, post)

            await self._cache_set(CacheKeys.post(post.id), serialize_post(post), self.post_ttl)
            await self._invalidate_lists(post.username)

        if self.metrics:
            self.metrics.increment_counter("posts_created_total")
        self.logger.info("Post created", post_id=post.id, username=post.username)
        return post

    async def get_all_posts(self) -> List[Post]:
        """All posts, newest first."""
        with self.tracer.start_as_current_span("posts.get_all_posts"):
            cached = await self._cache_get_list(CacheKeys.ALL_POSTS, "all_posts")
            if cached is not None:
                self.logger.debug("Posts retrieved from cache", count=len(cached))
                return cached

            posts = self._newest_first(
                await self._store_call("scan", StoreReadError, self.store.scan_all), "scan"
            )
            await self._cache_set(CacheKeys.ALL_POSTS, serialize_posts(posts), self.list_ttl)

        self.logger.info("Retrieved posts from store", count=len(posts))
        return posts

    async def get_posts_by_username(self, username: str) -> List[Post]:
        """One user's posts, newest first; an unknown user has none."""
        key = CacheKeys.user_posts(username)
        with self.tracer.start_as_current_span("posts.get_posts_by_username") as span:
            span.set_attribute("post.username", username)

            cached = await self._cache_get_list(key, "user_posts")
            if cached is not None:
                self.logger.debug("User posts retrieved from cache", username=username, count=len(cached))
                return cached

            posts = self._newest_first(
                await self._store_call("query", StoreReadError, self.store.query_by_partition, username), "query"
            )
            await self._cache_set(key, serialize_posts(posts), self.list_ttl)

        self.logger.info("Retrieved user posts from store", username=username, count=len(posts))
        return posts

    async def get_post_by_id(self, post_id: str) -> Optional[Post]:
        """A single post, or ``None`` when no such post exists."""
        key = CacheKeys.post(post_id)
        with self.tracer.start_as_current_span("posts.get_post_by_id") as span:
            span.set_attribute("post.id", post_id)

            result = await self._cache_get(key, "post")
            if result.hit:
                try:
                    return deserialize_post(result.value)
                except (TypeError, ValueError) as e:
                    await self._discard_corrupt(key, "post", e)

            post = await self._store_call("get", StoreReadError, self.store.get_by_key, post_id)
            if post is None:
                return None

            await self._cache_set(key, serialize_post(post), self.post_ttl)

        self.logger.info("Retrieved post from store", post_id=post_id)
        return post

    async def _store_call(
        self,
        operation: str,
        error_cls: Type[StoreError],
        func: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> Any:
        """Run a store operation, normalising failures to ``error_cls``."""
        start = time.perf_counter()
        status = "ok"
        try:
            return await func(*args)
        except StoreError as e:
            status = "error"
            self.logger.error("Store operation failed", operation=operation, code=e.code, error=e.message)
            raise
        except Exception as e:
            status = "error"
            self.logger.error("Store operation failed", operation=operation, error=str(e), exc_info=True)
            raise error_cls(f"Store {operation} failed: {e}", details={"operation": operation}) from e
        finally:
            if self.metrics:
                self.metrics.increment_counter("store_operations_total", operation=operation, status=status)
                self.metrics.observe_histogram(
                    "store_operation_duration_seconds", time.perf_counter() - start, operation=operation
                )

    def _newest_first(self, posts: List[Post], operation: str) -> List[Post]:
        """Sort store results; a record with an unreadable createdAt is a store fault."""
        try:
            return newest_first(posts)
        except (TypeError, ValueError) as e:
            self.logger.error("Malformed post record", operation=operation, error=str(e))
            raise StoreReadError(
                f"Malformed post record: {e}", details={"operation": operation}
            ) from e

    async def _cache_call(self, operation: str, func: Callable[..., Awaitable[CacheResult]], *args: Any) -> CacheResult:
        """Invoke the cache adapter, turning anything it raises into a failed result."""
        if self.cache is None:
            return CacheResult.unavailable("cache disabled")
        try:
            return await func(*args)
        except Exception as e:
            self.logger.warning("Cache adapter raised", operation=operation, error=str(e))
            return CacheResult.failed(str(e))

    async def _cache_get(self, key: str, cache_type: str) -> CacheResult:
        if self.cache is None:
            return CacheResult.unavailable("cache disabled")

        result = await self._cache_call("get", self.cache.get, key)
        if result.status is CacheStatus.UNAVAILABLE:
            self.logger.warning("Cache unavailable, reading from store", key=key, error=result.error)
        self._count("cache_requests_total", cache=cache_type, result=result.status.value)
        return result

    async def _cache_get_list(self, key: str, cache_type: str) -> Optional[List[Post]]:
        """Cached post list, or ``None`` when the store must be consulted."""
        result = await self._cache_get(key, cache_type)
        if not result.hit:
            return None
        try:
            return deserialize_posts(result.value)
        except (TypeError, ValueError) as e:
            await self._discard_corrupt(key, cache_type, e)
            return None

    async def _cache_set(self, key: str, value: str, ttl_seconds: int) -> None:
        if self.cache is None:
            return
        result = await self._cache_call("set", self.cache.set_with_ttl, key, value, ttl_seconds)
        if not result.ok:
            self.logger.warning("Cache unavailable, continuing without cache", key=key, error=result.error)
        self._count("cache_writes_total", operation="set", result=result.status.value)

    async def _invalidate_lists(self, username: str) -> None:
        """Drop the global list and the author's list; other users are untouched."""
        if self.cache is None:
            return
        result = await self._cache_call(
            "delete", self.cache.delete, CacheKeys.ALL_POSTS, CacheKeys.user_posts(username)
        )
        if result.ok:
            self.logger.debug("Cache invalidated for user", username=username)
        else:
            self.logger.warning("Cache unavailable, skipping cache invalidation", username=username, error=result.error)
        self._count("cache_writes_total", operation="invalidate", result=result.status.value)

    async def _discard_corrupt(self, key: str, cache_type: str, error: Exception) -> None:
        """A cached payload that does not decode is evicted and treated as a miss."""
        self.logger.error("Corrupt cache entry", key=key, error=str(error))
        self._count("cache_requests_total", cache=cache_type, result="corrupt")
        await self._cache_call("delete", self.cache.delete, key)

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
