"""Unit tests for blog post submission validation."""

from __future__ import annotations

from typing import Any

import pytest

from app.core.exceptions import InvalidArgumentError
from app.services.blog_validation import (
    BlogPostInput,
    require_valid_blog_post,
    validate_blog_post,
)


def _candidate(**overrides: Any) -> dict[str, Any]:
    candidate: dict[str, Any] = {
        "title": "  Shipping Faster with Next.js  ",
        "slug": " shipping-faster-with-nextjs ",
        "excerpt": "How we cut build times in half.",
        "content": "\n# Intro\n\nSome markdown.\n",
        "thumbnail_url": "https://example.com/cover.jpg",
        "status": "draft",
    }
    candidate.update(overrides)
    return candidate


def test_valid_post_is_normalized() -> None:
    result = validate_blog_post(_candidate())

    assert result.ok
    assert result.violations == []
    assert result.post == BlogPostInput(
        title="Shipping Faster with Next.js",
        slug="shipping-faster-with-nextjs",
        excerpt="How we cut build times in half.",
        content="# Intro\n\nSome markdown.",
        thumbnail_url="https://example.com/cover.jpg",
        status="draft",
    )


def test_empty_optional_fields_become_none() -> None:
    result = validate_blog_post(_candidate(excerpt="", thumbnail_url=""))

    assert result.post is not None
    assert result.post.excerpt is None
    assert result.post.thumbnail_url is None


@pytest.mark.parametrize(
    "candidate",
    [
        _candidate(),
        _candidate(excerpt="", thumbnail_url="", status="published"),
        _candidate(title="x" * 200, slug="a" * 200, excerpt="e" * 160, status="archived"),
    ],
)
def test_normalized_output_revalidates(candidate: dict[str, Any]) -> None:
    first = validate_blog_post(candidate)
    assert first.post is not None

    second = validate_blog_post(first.post.model_dump())

    assert second.ok
    assert second.post == first.post


@pytest.mark.parametrize(
    ("overrides", "field", "reason"),
    [
        ({"title": "   "}, "title", "Title is required"),
        ({"title": "x" * 201}, "title", "Title must be less than 200 characters"),
        ({"slug": ""}, "slug", "Slug is required"),
        (
            {"slug": "Has-Uppercase"},
            "slug",
            "Slug must only contain lowercase letters, numbers, and hyphens",
        ),
        (
            {"slug": "spaces not allowed"},
            "slug",
            "Slug must only contain lowercase letters, numbers, and hyphens",
        ),
        ({"slug": "a" * 201}, "slug", "Slug must be less than 200 characters"),
        ({"excerpt": "e" * 161}, "excerpt", "Excerpt must be less than 160 characters"),
        ({"content": " \n "}, "content", "Content is required"),
        ({"content": "c" * 50_001}, "content", "Content must be less than 50000 characters"),
        ({"thumbnail_url": "not a url"}, "thumbnail_url", "Invalid URL"),
        (
            {"thumbnail_url": "https://cdn.example.com/" + "a" * 2048},
            "thumbnail_url",
            "Thumbnail URL must be less than 2048 characters",
        ),
        ({"status": "scheduled"}, "status", "Status must be one of draft, published, archived"),
    ],
)
def test_rule_violations(overrides: dict[str, Any], field: str, reason: str) -> None:
    result = validate_blog_post(_candidate(**overrides))

    assert not result.ok
    assert result.first_violation is not None
    assert result.first_violation.field == field
    assert result.first_violation.reason == reason


def test_missing_required_field_is_reported() -> None:
    candidate = _candidate()
    del candidate["content"]

    result = validate_blog_post(candidate)

    assert result.first_violation is not None
    assert result.first_violation.field == "content"
    assert result.first_violation.reason == "Content is required"


def test_missing_status_is_reported_not_defaulted() -> None:
    candidate = _candidate()
    del candidate["status"]

    result = validate_blog_post(candidate)

    assert not result.ok
    assert result.first_violation is not None
    assert result.first_violation.field == "status"
    assert result.first_violation.reason == "Status is required"


def test_first_violation_follows_field_order() -> None:
    result = validate_blog_post(_candidate(status="bogus", slug="BAD", title=""))

    assert [v.field for v in result.violations] == ["title", "slug", "status"]
    assert result.first_violation is not None
    assert result.first_violation.field == "title"


def test_require_valid_blog_post_raises_first_violation() -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        require_valid_blog_post(_candidate(slug="Nope!", content=""))

    assert exc_info.value.field == "slug"
    assert exc_info.value.status_code == 400
