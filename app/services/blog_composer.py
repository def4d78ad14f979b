"""Admin blog composer: draft editing, AI-assisted filling and saving."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import InvalidArgumentError, PersistenceError
from app.models.blog import BlogPost
from app.services.blog_generation import DEFAULT_TONE, GenerationResult
from app.services.blog_validation import require_valid_blog_post
from app.services.content_service import BlogPostDraft, ContentService
from app.services.slugs import derive_slug

logger = logging.getLogger(__name__)

ADMIN_HOME_PATH = "/admin"

Generator = Callable[[str, str], Awaitable[GenerationResult]]

_EDITABLE_FIELDS = frozenset({"excerpt", "content", "thumbnail_url", "status"})


@dataclass
class BlogDraft:
    """In-memory form state; never persisted until a successful save."""

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    thumbnail_url: str = ""
    status: str = "draft"

    def as_candidate(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComposerSaveResult:
    post: BlogPost
    message: str
    redirect_to: str = ADMIN_HOME_PATH


class BlogComposer:
    """Orchestrates validator, slug deriver, generator and content service.

    ``generator`` is any ``async (topic, tone) -> GenerationResult`` callable,
    normally a gateway already bound to the operator's credential.
    """

    def __init__(
        self,
        content_service: ContentService,
        generator: Generator | None = None,
        draft: BlogDraft | None = None,
    ) -> None:
        self.content_service = content_service
        self.generator = generator
        self.draft = draft or BlogDraft()
        self.slug_edited = False
        self.is_generating = False
        self.is_saving = False

    def set_title(self, title: str) -> None:
        """Update the title; the slug follows unless it was edited by hand."""
        self.draft.title = title
        if not self.slug_edited:
            self.draft.slug = derive_slug(title)

    def set_slug(self, slug: str) -> None:
        self.draft.slug = slug
        self.slug_edited = True

    def rederive_slug(self) -> None:
        self.slug_edited = False
        self.draft.slug = derive_slug(self.draft.title)

    def update(self, **fields: str) -> None:
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self.draft, name, value)

    async def generate(self, topic: str, tone: str = DEFAULT_TONE) -> GenerationResult:
        """Fill the draft from an AI generation for ``topic``."""
        if not topic or not topic.strip():
            raise InvalidArgumentError("topic", "Please enter a topic for the blog post")
        if self.generator is None:
            raise RuntimeError("BlogComposer was created without a generator")

        self.is_generating = True
        try:
            result = await self.generator(topic, tone)
        finally:
            self.is_generating = False

        self.draft.title = result.title
        self.draft.excerpt = result.excerpt
        self.draft.content = result.content
        self.rederive_slug()

        logger.info(
            "Draft filled from AI generation",
            extra={"slug": self.draft.slug, "degraded": result.degraded},
        )
        return result

    async def save(self, credential: str) -> ComposerSaveResult:
        """Validate, stamp author/publication time and insert the draft.

        Nothing reaches the content service unless validation passes.
        """
        post = require_valid_blog_post(self.draft.as_candidate())

        self.is_saving = True
        try:
            identity = await self.content_service.get_identity(credential)
            published_at = datetime.now(timezone.utc) if post.status == "published" else None
            try:
                stored = await self.content_service.insert(
                    BlogPostDraft(
                        title=post.title,
                        slug=post.slug,
                        content=post.content,
                        status=post.status,
                        author_id=identity.id,
                        excerpt=post.excerpt,
                        thumbnail_url=post.thumbnail_url,
                        published_at=published_at,
                    )
                )
            except SQLAlchemyError as exc:
                raise PersistenceError("Failed to save blog post") from exc
        finally:
            self.is_saving = False

        state = "published" if post.status == "published" else "saved as draft"
        logger.info(
            "Blog post saved",
            extra={"post_id": stored.id, "author_id": identity.id, "status": post.status},
        )
        return ComposerSaveResult(
            post=stored,
            message=f"Your blog post has been {state}",
        )
