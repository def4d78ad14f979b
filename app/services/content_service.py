"""Authenticated content service.

The gateway and the composer talk to storage only through the
``ContentService`` protocol, which the API layer injects per request. Tests
substitute in-memory fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DuplicateSlugError,
    PersistenceError,
    PostNotFoundError,
    UnauthenticatedError,
)
from app.core.security import verify_access_token
from app.models.blog import BlogPost
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

SLUG_UNIQUE_INDEX = "ix_blog_posts_slug"


def _violated_constraint(exc: IntegrityError) -> str | None:
    """Constraint name reported by the driver, if any."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return str(name)
    return None


def is_slug_conflict(exc: IntegrityError) -> bool:
    """Whether an integrity error comes from the unique slug index."""
    constraint = _violated_constraint(exc)
    if constraint is not None:
        return constraint == SLUG_UNIQUE_INDEX
    message = str(exc.orig)
    return SLUG_UNIQUE_INDEX in message or "blog_posts.slug" in message


@dataclass(frozen=True)
class Identity:
    """The authenticated caller behind a credential."""

    id: str
    email: str
    full_name: str | None = None


@dataclass(frozen=True)
class BlogPostDraft:
    """A validated post stamped with author and publication time, ready to insert."""

    title: str
    slug: str
    content: str
    status: str
    author_id: str
    excerpt: str | None = None
    thumbnail_url: str | None = None
    published_at: datetime | None = None


class ContentService(Protocol):
    """Capability for reading/writing posts and role records."""

    async def insert(self, post: BlogPostDraft) -> BlogPost: ...

    async def get_identity(self, credential: str) -> Identity: ...

    async def has_role(self, identity_id: str, role_name: str) -> bool: ...

    async def list_published(self, offset: int, limit: int) -> tuple[list[BlogPost], int]: ...

    async def get_by_slug(self, slug: str, status: str = "published") -> BlogPost: ...

    async def count_by_status(self) -> dict[str, int]: ...


class SqlContentService:
    """``ContentService`` backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, post: BlogPostDraft) -> BlogPost:
        """Insert a post; the slug must not already exist."""
        existing = await self.session.scalar(
            select(BlogPost.id).where(BlogPost.slug == post.slug)
        )
        if existing is not None:
            logger.warning("Blog insert rejected: duplicate slug", extra={"slug": post.slug})
            raise DuplicateSlugError(post.slug)

        record = BlogPost(
            title=post.title,
            slug=post.slug,
            excerpt=post.excerpt,
            content=post.content,
            thumbnail_url=post.thumbnail_url,
            status=post.status,
            author_id=post.author_id,
            published_at=post.published_at,
        )
        self.session.add(record)
        try:
            await self.session.flush()
            await self.session.refresh(record)
        except IntegrityError as exc:
            await self.session.rollback()
            if is_slug_conflict(exc):
                logger.warning("Blog insert rejected: duplicate slug", extra={"slug": post.slug})
                raise DuplicateSlugError(post.slug) from exc
            logger.error(
                "Blog insert rejected by constraint",
                extra={
                    "slug": post.slug,
                    "constraint": _violated_constraint(exc),
                    "error": repr(exc.orig),
                },
            )
            raise PersistenceError("Failed to save blog post") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Blog insert failed", extra={"slug": post.slug, "error": repr(exc)})
            raise PersistenceError("Failed to save blog post") from exc

        logger.info(
            "Blog post inserted",
            extra={"post_id": record.id, "slug": record.slug, "status": record.status},
        )
        return record

    async def get_identity(self, credential: str) -> Identity:
        """Resolve an access token to an active user."""
        user_id = verify_access_token(credential)
        user = await self.session.get(User, user_id)
        if user is None or not user.is_active:
            logger.warning("Credential resolved to unknown or inactive user", extra={"user_id": user_id})
            raise UnauthenticatedError()
        return Identity(id=user.id, email=user.email, full_name=user.full_name)

    async def has_role(self, identity_id: str, role_name: str) -> bool:
        """Single equality lookup against the role-membership table."""
        role_id = await self.session.scalar(
            select(UserRole.id).where(
                UserRole.user_id == identity_id,
                UserRole.role == role_name,
            )
        )
        return role_id is not None

    async def list_published(self, offset: int, limit: int) -> tuple[list[BlogPost], int]:
        """Return a page of published posts (newest first) and the total count."""
        query = select(BlogPost).where(BlogPost.status == "published")

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(BlogPost.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_by_slug(self, slug: str, status: str = "published") -> BlogPost:
        """Return the post with ``slug`` in ``status``."""
        post = await self.session.scalar(
            select(BlogPost).where(BlogPost.slug == slug, BlogPost.status == status)
        )
        if post is None:
            raise PostNotFoundError(slug)
        return post

    async def count_by_status(self) -> dict[str, int]:
        """Return post counts grouped by status."""
        result = await self.session.execute(
            select(BlogPost.status, func.count()).group_by(BlogPost.status)
        )
        return {status: count for status, count in result.all()}
