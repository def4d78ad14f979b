"""Blog post submission validation.

Validation is a pure function over the admin form state. It either returns a
normalized ``BlogPostInput`` or the ordered list of field violations; callers
surface only the first violation and must not persist anything on failure.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import AnyUrl, BaseModel, ConfigDict, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import InvalidArgumentError
from app.schemas.blog import BLOG_POST_STATUSES, BlogPostStatus

MAX_TITLE_LENGTH = 200
MAX_SLUG_LENGTH = 200
MAX_EXCERPT_LENGTH = 160
MAX_CONTENT_LENGTH = 50_000
MAX_THUMBNAIL_URL_LENGTH = 2048

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

_FIELD_LABELS = {
    "title": "Title",
    "slug": "Slug",
    "excerpt": "Excerpt",
    "content": "Content",
    "thumbnail_url": "Thumbnail URL",
    "status": "Status",
}

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def _required_text(value: Any, label: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} is required")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{label} is required")
    if len(cleaned) > max_length:
        raise ValueError(f"{label} must be less than {max_length} characters")
    return cleaned


class BlogPostInput(BaseModel):
    """A validated, normalized blog post submission."""

    model_config = ConfigDict(extra="ignore")

    title: str
    slug: str
    excerpt: str | None = None
    content: str
    thumbnail_url: str | None = None
    status: BlogPostStatus

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _required_text(value, "Title", MAX_TITLE_LENGTH)

    @field_validator("slug", mode="before")
    @classmethod
    def _validate_slug(cls, value: Any) -> str:
        slug = _required_text(value, "Slug", MAX_SLUG_LENGTH)
        if not SLUG_PATTERN.match(slug):
            raise ValueError("Slug must only contain lowercase letters, numbers, and hyphens")
        return slug

    @field_validator("excerpt", mode="before")
    @classmethod
    def _validate_excerpt(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("Excerpt must be a string")
        if len(value) > MAX_EXCERPT_LENGTH:
            raise ValueError(f"Excerpt must be less than {MAX_EXCERPT_LENGTH} characters")
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _validate_content(cls, value: Any) -> str:
        return _required_text(value, "Content", MAX_CONTENT_LENGTH)

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _validate_thumbnail_url(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("Invalid URL")
        if len(value) > MAX_THUMBNAIL_URL_LENGTH:
            raise ValueError(
                f"Thumbnail URL must be less than {MAX_THUMBNAIL_URL_LENGTH} characters"
            )
        try:
            _url_adapter.validate_python(value)
        except PydanticValidationError as exc:
            raise ValueError("Invalid URL") from exc
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _validate_status(cls, value: Any) -> str:
        if value not in BLOG_POST_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(BLOG_POST_STATUSES)}")
        return value


@dataclass(frozen=True)
class FieldViolation:
    """A single failed validation rule."""

    field: str
    reason: str


@dataclass(frozen=True)
class BlogPostValidation:
    """Outcome of validating one submission."""

    post: BlogPostInput | None = None
    violations: list[FieldViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.post is not None

    @property
    def first_violation(self) -> FieldViolation | None:
        return self.violations[0] if self.violations else None


def _violation_from_error(error: Mapping[str, Any]) -> FieldViolation:
    loc = error.get("loc") or ("submission",)
    field_name = str(loc[0])
    label = _FIELD_LABELS.get(field_name, field_name)

    if error.get("type") == "missing":
        return FieldViolation(field_name, f"{label} is required")

    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return FieldViolation(field_name, str(ctx_error))
    return FieldViolation(field_name, str(error.get("msg", "Invalid value")))


def validate_blog_post(candidate: Mapping[str, Any]) -> BlogPostValidation:
    """Validate a candidate post, returning the normalized record or violations.

    Violations are ordered by field (title, slug, excerpt, content,
    thumbnail_url, status).
    """
    try:
        post = BlogPostInput.model_validate(dict(candidate))
    except PydanticValidationError as exc:
        violations = [_violation_from_error(error) for error in exc.errors()]
        order = list(_FIELD_LABELS)
        violations.sort(
            key=lambda v: order.index(v.field) if v.field in order else len(order)
        )
        return BlogPostValidation(violations=violations)
    return BlogPostValidation(post=post)


def require_valid_blog_post(candidate: Mapping[str, Any]) -> BlogPostInput:
    """Validate a candidate post, raising the first violation."""
    result = validate_blog_post(candidate)
    if result.post is None:
        violation = result.first_violation
        assert violation is not None
        raise InvalidArgumentError(violation.field, violation.reason)
    return result.post
