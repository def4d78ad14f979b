"""Public blog endpoints."""

import math

from fastapi import APIRouter, Query

from app.api.v1.blogs.constants import (
    DEFAULT_PAGE,
    MAX_PAGE,
    WORDS_PER_MINUTE,
)
from app.config import settings
from app.dependencies import ContentServiceDep
from app.schemas.blog import (
    BlogPostDetailResponse,
    BlogPostListResponse,
    BlogPostResponse,
    BlogPostSummaryResponse,
)

router = APIRouter()


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return (offset, limit) for a 1-based page number."""
    return (page - 1) * page_size, page_size


def reading_minutes(content: str) -> int:
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


@router.get("", response_model=BlogPostListResponse)
async def list_blogs(
    content_service: ContentServiceDep,
    page: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGE),
) -> BlogPostListResponse:
    """List published posts, newest first."""
    page_size = settings.blog_page_size
    offset, limit = page_bounds(page, page_size)
    posts, total = await content_service.list_published(offset, limit)

    return BlogPostListResponse(
        items=[BlogPostSummaryResponse.model_validate(post) for post in posts],
        total=total,
        page=page,
        page_size=page_size,
        has_more=page * page_size < total,
    )


@router.get("/{slug}", response_model=BlogPostDetailResponse)
async def get_blog(slug: str, content_service: ContentServiceDep) -> BlogPostDetailResponse:
    """Get a single published post by slug."""
    post = await content_service.get_by_slug(slug, "published")
    base = BlogPostResponse.model_validate(post)
    return BlogPostDetailResponse(
        **base.model_dump(),
        reading_minutes=reading_minutes(post.content),
    )
