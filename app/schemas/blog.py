"""Blog post and AI generation schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

BlogPostStatus = Literal["draft", "published", "archived"]
BLOG_POST_STATUSES: tuple[str, ...] = ("draft", "published", "archived")


class BlogPostResponse(BaseModel):
    """Schema for a stored blog post."""

    id: str
    title: str
    slug: str
    excerpt: str | None
    content: str
    thumbnail_url: str | None
    status: BlogPostStatus
    author_id: str
    published_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BlogPostSummaryResponse(BaseModel):
    """Listing card for a published post."""

    id: str
    title: str
    slug: str
    excerpt: str | None
    thumbnail_url: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BlogPostDetailResponse(BlogPostResponse):
    """Single post view with a reading-time estimate."""

    reading_minutes: int


class BlogPostListResponse(BaseModel):
    """Schema for a page of published posts."""

    items: list[BlogPostSummaryResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class BlogDraftPayload(BaseModel):
    """Admin form state; validated later by the blog post validator."""

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    thumbnail_url: str = ""
    status: str = "draft"


class ComposeBlogRequest(BaseModel):
    """Ask the composer to fill a draft from an AI generation."""

    topic: str
    tone: str = "professional"
    draft: BlogDraftPayload | None = None


class BlogSaveResponse(BaseModel):
    """Result of a successful admin save."""

    post: BlogPostResponse
    message: str
    redirect_to: str


class GenerateBlogResponse(BaseModel):
    """Structured reply of the AI generation gateway."""

    title: str
    excerpt: str
    content: str


class AdminStatsResponse(BaseModel):
    """Admin dashboard counters."""

    total_posts: int
    by_status: dict[str, int] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    error: str
