"""
Integration tests for the complete posts flow: HTTP layer, posts service,
cache and store wired together.
"""

import json

import pytest
from fastapi.testclient import TestClient

from shared.test_helpers import (
    InMemoryCache,
    InMemoryPostStore,
    UnavailableCache,
    get_test_config,
    post_factory,
)
from service_posts.app.main import create_app
from service_posts.app.posts.service import PostsService


class TestPostsFlow:
    """Posts created over HTTP are visible through every read path."""

    @pytest.fixture
    def store(self):
        return InMemoryPostStore()

    @pytest.fixture
    def cache(self):
        return InMemoryCache()

    @pytest.fixture
    def client(self, store, cache):
        with TestClient(create_app(get_test_config(), store=store, cache=cache)) as client:
            yield client

    def test_create_then_read_everywhere(self, client):
        alice = client.post("/api/posts", json={"username": "alice", "content": "hi"}).json()
        bob = client.post("/api/posts", json={"username": "bob", "content": "yo"}).json()

        all_ids = [post["id"] for post in client.get("/api/posts").json()]
        assert set(all_ids) == {alice["id"], bob["id"]}

        alice_posts = client.get("/api/users/alice/posts").json()
        assert [post["id"] for post in alice_posts] == [alice["id"]]
        assert alice_posts[0]["attributedTo"] == "http://testserver/users/alice"

        assert client.get(f"/api/posts/{bob['id']}").json()["content"] == "yo"
        assert client.get("/api/posts/3").status_code == 404

    def test_cached_lists_refresh_after_create(self, client, store, cache):
        client.post("/api/posts", json={"username": "alice", "content": "first"})

        assert len(client.get("/api/posts").json()) == 1
        assert len(client.get("/api/users/alice/posts").json()) == 1
        assert "posts" in cache.data
        assert "user:alice:posts" in cache.data
        scans = store.count("scan")

        # Served from cache
        client.get("/api/posts")
        assert store.count("scan") == scans

        client.post("/api/posts", json={"username": "alice", "content": "second"})

        assert {post["content"] for post in client.get("/api/posts").json()} == {"first", "second"}
        assert len(client.get("/api/users/alice/posts").json()) == 2
        assert store.count("scan") == scans + 1

    def test_corrupt_cache_entry_is_replaced(self, client, store, cache):
        post = post_factory.create("p1")
        store.items[post.id] = post.to_item()
        cache.data["posts"] = "{not json"

        response = client.get("/api/posts")

        assert [item["id"] for item in response.json()] == ["p1"]
        assert json.loads(cache.data["posts"])[0]["id"] == "p1"


class TestPostsScenario:
    """The canonical two-user timeline, driven through the posts service."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cache_factory", [InMemoryCache, UnavailableCache, lambda: None])
    async def test_two_user_timeline(self, cache_factory):
        service = PostsService(InMemoryPostStore(), cache_factory())
        first = post_factory.create("1", username="alice", content="hi", created_at="2024-01-01T00:00:00Z")
        second = post_factory.create("2", username="bob", content="yo", created_at="2024-01-02T00:00:00Z")

        await service.create_post(first)
        await service.create_post(second)

        assert await service.get_all_posts() == [second, first]
        assert await service.get_posts_by_username("alice") == [first]
        assert await service.get_post_by_id("3") is None
        # Repeated reads agree with the first ones.
        assert await service.get_all_posts() == [second, first]
        assert await service.get_post_by_id("1") == first
