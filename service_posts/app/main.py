"""
Posts service for fedipost.

Serves the posts API, the HTML front page and the federation discovery
documents on top of the cached posts data path.
"""

from typing import Any, Dict, List, Optional

from fastapi import Query, Response
from fastapi.responses import HTMLResponse, JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import NotFoundError

from .cache.base import PostCache
from .cache.redis_cache import RedisCache
from .federation import documents
from .pages import render_index
from .persistence.base import PostStore
from .persistence.dynamodb import DynamoDBPostStore
from .posts.factory import new_post
from .posts.models import PostCreateRequest, PostCreatedResponse
from .posts.service import PostsService

SERVICE_NAME = "posts"
DEFAULT_PORT = 8001


class PostsAPIService(BaseService):
    """Posts service implementation.

    Adapters can be injected; otherwise DynamoDB and (when enabled) Redis
    adapters are built from configuration. Either way they are opened on
    startup and closed on shutdown.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        store: Optional[PostStore] = None,
        cache: Optional[PostCache] = None,
    ):
        super().__init__(SERVICE_NAME, DEFAULT_PORT, config=config)

        self.store = store or DynamoDBPostStore(
            self.config.posts_table,
            index_name=self.config.posts_index,
            region_name=self.config.aws_region,
            endpoint_url=self.config.dynamodb_endpoint_url,
            aws_access_key_id=self.config.aws_access_key_id,
            aws_secret_access_key=self.config.aws_secret_access_key,
        )
        if cache is None and self.config.cache_enabled:
            cache = RedisCache(self.config.redis_url, required=self.config.cache_required)
        self.cache = cache

        self.posts = PostsService(
            self.store,
            self.cache,
            metrics=self.metrics,
            post_ttl=self.config.post_cache_ttl,
            list_ttl=self.config.list_cache_ttl,
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.store.start()
            if self.cache:
                await self.cache.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            if self.cache:
                await self.cache.stop()
            await self.store.stop()

        self._setup_posts_routes()
        self._setup_federation_routes()

    @property
    def base_url(self) -> str:
        return self.config.public_base_url()

    async def _check_dependencies(self) -> Dict[str, str]:
        dependencies = {"dynamodb": "ok" if await self.store.health_check() else "error"}
        if self.cache is None:
            dependencies["redis"] = "disabled"
        else:
            # The cache is optional; a failing Redis degrades rather than fails health.
            dependencies["redis"] = "ok" if await self.cache.health_check() else "degraded"
        if dependencies["dynamodb"] != "ok":
            raise RuntimeError("DynamoDB unavailable")
        return dependencies

    def _setup_posts_routes(self):
        """Set up the posts API and front page."""

        @self.app.get("/", response_class=HTMLResponse)
        async def index():
            """Front page."""
            return render_index(self.base_url, self.config.node_name, self.config.node_description)

        @self.app.post("/api/posts", status_code=201, response_model=PostCreatedResponse)
        async def create_post(request: PostCreateRequest):
            """Create a post."""
            post = new_post(request.username, request.content, self.base_url)
            await self.posts.create_post(post)
            self.metrics.record_business_event("post_created")
            return PostCreatedResponse(
                id=post.id,
                username=post.username,
                content=post.content,
                createdAt=post.created_at,
            )

        @self.app.get("/api/posts")
        async def list_posts() -> List[Dict[str, str]]:
            """All posts, newest first."""
            return [post.to_dict() for post in await self.posts.get_all_posts()]

        @self.app.get("/api/posts/{post_id}")
        async def get_post(post_id: str) -> Dict[str, str]:
            """A single post."""
            post = await self.posts.get_post_by_id(post_id)
            if post is None:
                raise NotFoundError(f"Post {post_id} not found", details={"post_id": post_id})
            return post.to_dict()

        @self.app.get("/api/users/{username}/posts")
        async def list_user_posts(username: str) -> List[Dict[str, str]]:
            """One user's posts, newest first."""
            return [post.to_dict() for post in await self.posts.get_posts_by_username(username)]

    def _setup_federation_routes(self):
        """Set up federation discovery routes."""

        @self.app.get("/.well-known/webfinger")
        async def webfinger(resource: Optional[str] = Query(None, description="acct: URI")):
            """WebFinger lookup for a local account."""
            return JSONResponse(
                content=documents.webfinger(resource, self.base_url),
                media_type=documents.JRD_JSON,
            )

        @self.app.get("/.well-known/nodeinfo")
        async def nodeinfo_discovery() -> Dict[str, Any]:
            """NodeInfo discovery document."""
            return documents.nodeinfo_links(self.base_url)

        @self.app.get("/nodeinfo/2.0")
        async def nodeinfo() -> Dict[str, Any]:
            """NodeInfo 2.0 document."""
            posts = await self.posts.get_all_posts()
            return documents.nodeinfo(posts, self.config)

        @self.app.get("/users/{identifier}")
        async def actor(identifier: str):
            """ActivityPub actor for a local user."""
            return JSONResponse(
                content=documents.actor(identifier, self.base_url),
                media_type=documents.ACTIVITY_JSON,
            )


def create_app(
    config: Optional[ServiceConfig] = None,
    *,
    store: Optional[PostStore] = None,
    cache: Optional[PostCache] = None,
):
    """Create posts service application."""
    service = PostsAPIService(config, store=store, cache=cache)
    return service.app


if __name__ == "__main__":
    service = PostsAPIService()
    service.run()
