"""User and role-membership models for authentication."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, StringUUID, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.blog import BlogPost


class User(Base, UUIDMixin, TimestampMixin):
    """User account for authentication and post authorship."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    # Relationships
    roles: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    blog_posts: Mapped[list[BlogPost]] = relationship(
        "BlogPost",
        back_populates="author",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class UserRole(Base, UUIDMixin, TimestampMixin):
    """Role-membership record granting a named permission to a user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),
    )

    user_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False)

    user: Mapped[User] = relationship("User", back_populates="roles")

    def __repr__(self) -> str:
        return f"<UserRole {self.user_id}:{self.role}>"
