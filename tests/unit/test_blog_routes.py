"""Unit tests for public blog listing and detail endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.v1.blogs.routes import page_bounds, reading_minutes
from app.config import settings
from app.core.exceptions import PostNotFoundError
from app.dependencies import get_content_service
from app.main import create_app

BLOGS_PATH = f"{settings.api_v1_prefix}/blogs"
_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _post(index: int, *, status: str = "published", content: str = "Body") -> SimpleNamespace:
    created_at = _EPOCH + timedelta(days=index)
    return SimpleNamespace(
        id=f"post_{index}",
        title=f"Post {index}",
        slug=f"post-{index}",
        excerpt=None,
        content=content,
        thumbnail_url=None,
        status=status,
        author_id="user_admin",
        published_at=created_at if status == "published" else None,
        created_at=created_at,
    )


class _FakeContentService:
    def __init__(self, posts: list[SimpleNamespace]) -> None:
        self.posts = posts
        self.list_calls: list[tuple[int, int]] = []

    async def list_published(self, offset: int, limit: int) -> tuple[list[SimpleNamespace], int]:
        self.list_calls.append((offset, limit))
        published = sorted(
            (post for post in self.posts if post.status == "published"),
            key=lambda post: post.created_at,
            reverse=True,
        )
        return published[offset : offset + limit], len(published)

    async def get_by_slug(self, slug: str, status: str = "published") -> SimpleNamespace:
        for post in self.posts:
            if post.slug == slug and post.status == status:
                return post
        raise PostNotFoundError(slug)


def _client(service: _FakeContentService) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_content_service] = lambda: service
    return TestClient(app)


def test_page_bounds_are_one_based() -> None:
    assert page_bounds(1, 9) == (0, 9)
    assert page_bounds(3, 9) == (18, 9)


@pytest.mark.parametrize(
    ("content", "expected"),
    [("", 1), ("word " * 200, 1), ("word " * 201, 2), ("word " * 1000, 5)],
)
def test_reading_minutes(content: str, expected: int) -> None:
    assert reading_minutes(content) == expected


def test_list_returns_newest_published_first_with_pagination() -> None:
    posts = [_post(i) for i in range(12)] + [_post(99, status="draft")]
    service = _FakeContentService(posts)
    client = _client(service)

    first = client.get(BLOGS_PATH)
    second = client.get(BLOGS_PATH, params={"page": 2})

    assert first.status_code == 200
    body = first.json()
    assert body["total"] == 12
    assert body["page_size"] == settings.blog_page_size
    assert body["has_more"] is True
    assert [item["slug"] for item in body["items"]][:2] == ["post-11", "post-10"]
    assert len(body["items"]) == 9

    assert second.json()["has_more"] is False
    assert len(second.json()["items"]) == 3
    assert service.list_calls == [(0, 9), (9, 9)]


def test_list_rejects_page_below_one() -> None:
    response = _client(_FakeContentService([])).get(BLOGS_PATH, params={"page": 0})

    assert response.status_code == 400
    assert "page" in response.json()["error"]


def test_detail_includes_reading_minutes() -> None:
    service = _FakeContentService([_post(1, content="word " * 450)])

    response = _client(service).get(f"{BLOGS_PATH}/post-1")

    assert response.status_code == 200
    assert response.json()["slug"] == "post-1"
    assert response.json()["reading_minutes"] == 3


def test_detail_hides_unpublished_posts() -> None:
    service = _FakeContentService([_post(1, status="draft")])

    response = _client(service).get(f"{BLOGS_PATH}/post-1")

    assert response.status_code == 404
    assert response.json() == {"error": "Blog post not found: post-1"}
