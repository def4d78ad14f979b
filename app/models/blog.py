"""Blog post model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, StringUUID, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.user import User


class BlogPost(Base, UUIDMixin, TimestampMixin):
    """A Markdown blog post authored from the admin area."""

    __tablename__ = "blog_posts"
    __table_args__ = (
        Index("ix_blog_posts_status_created_at", "status", "created_at"),
        CheckConstraint(
            "status IN ('draft', 'published', 'archived')",
            name="ck_blog_posts_status",
        ),
        CheckConstraint(
            "(status = 'published') = (published_at IS NOT NULL)",
            name="ck_blog_posts_published_at",
        ),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    excerpt: Mapped[str | None] = mapped_column(String(160), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False)
    author_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    author: Mapped[User] = relationship("User", back_populates="blog_posts")

    def __repr__(self) -> str:
        return f"<BlogPost {self.slug} ({self.status})>"
