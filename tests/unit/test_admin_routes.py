"""Unit tests for admin authoring endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

from fastapi.testclient import TestClient

from app.config import settings
from app.core.exceptions import DuplicateSlugError, UnauthenticatedError
from app.dependencies import get_blog_generation_gateway, get_content_service
from app.main import create_app
from app.services.blog_generation import BlogGenerationGateway
from app.services.content_service import BlogPostDraft, Identity

ADMIN_PREFIX = f"{settings.api_v1_prefix}/admin"
ADMIN = Identity(id="user_admin", email="admin@example.com")
EDITOR = Identity(id="user_editor", email="editor@example.com")
ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


class _FakeContentService:
    def __init__(self) -> None:
        self.posts: list[SimpleNamespace] = []

    async def get_identity(self, credential: str) -> Identity:
        identities = {"admin-token": ADMIN, "editor-token": EDITOR}
        if credential not in identities:
            raise UnauthenticatedError()
        return identities[credential]

    async def has_role(self, identity_id: str, role_name: str) -> bool:
        return identity_id == ADMIN.id and role_name == "admin"

    async def insert(self, post: BlogPostDraft) -> SimpleNamespace:
        if any(existing.slug == post.slug for existing in self.posts):
            raise DuplicateSlugError(post.slug)
        stored = SimpleNamespace(
            id=f"post_{len(self.posts) + 1}",
            created_at=datetime.now(timezone.utc),
            **asdict(post),
        )
        self.posts.append(stored)
        return stored

    async def count_by_status(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for post in self.posts:
            counts[post.status] = counts.get(post.status, 0) + 1
        return counts


class _FakeCompletionClient:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls = 0

    async def __aenter__(self) -> "_FakeCompletionClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def complete(self, messages: Any, *, temperature: float | None = None) -> str:
        self.calls += 1
        return self.reply


def _client(
    service: _FakeContentService,
    completion: _FakeCompletionClient | None = None,
) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_content_service] = lambda: service
    if completion is not None:
        app.dependency_overrides[get_blog_generation_gateway] = lambda: BlogGenerationGateway(
            service,
            client_factory=lambda: completion,
        )
    return TestClient(app)


def _draft(**overrides: Any) -> dict[str, Any]:
    draft = {
        "title": "Streaming SSR",
        "slug": "streaming-ssr",
        "excerpt": "Ship HTML sooner.",
        "content": "# Streaming\n\nBody",
        "thumbnail_url": "",
        "status": "published",
    }
    draft.update(overrides)
    return draft


def test_create_blog_persists_published_post_for_admin() -> None:
    service = _FakeContentService()

    response = _client(service).post(f"{ADMIN_PREFIX}/blogs", json=_draft(), headers=ADMIN_HEADERS)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Your blog post has been published"
    assert body["redirect_to"] == "/admin"
    assert body["post"]["author_id"] == ADMIN.id
    assert body["post"]["published_at"] is not None
    assert body["post"]["thumbnail_url"] is None
    assert len(service.posts) == 1


def test_create_blog_draft_has_no_published_at() -> None:
    service = _FakeContentService()

    response = _client(service).post(
        f"{ADMIN_PREFIX}/blogs",
        json=_draft(status="draft"),
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 201
    assert response.json()["post"]["published_at"] is None
    assert response.json()["message"] == "Your blog post has been saved as draft"


def test_create_blog_invalid_slug_is_400_and_not_stored() -> None:
    service = _FakeContentService()

    response = _client(service).post(
        f"{ADMIN_PREFIX}/blogs",
        json=_draft(slug="Not A Slug"),
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Slug must only contain lowercase letters, numbers, and hyphens"
    }
    assert service.posts == []


def test_create_blog_duplicate_slug_is_409() -> None:
    service = _FakeContentService()
    client = _client(service)

    first = client.post(f"{ADMIN_PREFIX}/blogs", json=_draft(), headers=ADMIN_HEADERS)
    second = client.post(f"{ADMIN_PREFIX}/blogs", json=_draft(), headers=ADMIN_HEADERS)

    assert first.status_code == 201
    assert second.status_code == 409
    assert len(service.posts) == 1


def test_create_blog_requires_admin() -> None:
    service = _FakeContentService()
    client = _client(service)

    anonymous = client.post(f"{ADMIN_PREFIX}/blogs", json=_draft())
    editor = client.post(
        f"{ADMIN_PREFIX}/blogs",
        json=_draft(),
        headers={"Authorization": "Bearer editor-token"},
    )

    assert anonymous.status_code == 401
    assert editor.status_code == 403
    assert editor.json() == {"error": "Forbidden - Admin access required"}
    assert service.posts == []


def test_compose_fills_draft_and_derives_slug() -> None:
    service = _FakeContentService()
    completion = _FakeCompletionClient(
        '```json\n{"title":"React Server Components","excerpt":"E","content":"C"}\n```'
    )

    response = _client(service, completion).post(
        f"{ADMIN_PREFIX}/blogs/compose",
        json={"topic": "server components", "draft": {"thumbnail_url": "https://cdn.example/a.png"}},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {
        "title": "React Server Components",
        "slug": "react-server-components",
        "excerpt": "E",
        "content": "C",
        "thumbnail_url": "https://cdn.example/a.png",
        "status": "draft",
    }
    assert completion.calls == 1
    assert service.posts == []


def test_compose_blank_topic_is_400_without_upstream_call() -> None:
    service = _FakeContentService()
    completion = _FakeCompletionClient("{}")

    response = _client(service, completion).post(
        f"{ADMIN_PREFIX}/blogs/compose",
        json={"topic": "  "},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a topic for the blog post"}
    assert completion.calls == 0


def test_stats_counts_posts_by_status() -> None:
    service = _FakeContentService()
    client = _client(service)
    client.post(f"{ADMIN_PREFIX}/blogs", json=_draft(), headers=ADMIN_HEADERS)
    client.post(
        f"{ADMIN_PREFIX}/blogs",
        json=_draft(slug="second-post", status="draft"),
        headers=ADMIN_HEADERS,
    )

    response = client.get(f"{ADMIN_PREFIX}/stats", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"total_posts": 2, "by_status": {"published": 1, "draft": 1}}
