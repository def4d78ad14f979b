"""Custom exception classes for the application."""

from typing import Any


class BlogSiteError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class UnauthenticatedError(BlogSiteError):
    """Missing, invalid or expired credential."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized - Invalid token") -> None:
        super().__init__(message)


class ForbiddenError(BlogSiteError):
    """Authenticated identity lacks the required role."""

    status_code = 403

    def __init__(self, message: str = "Forbidden - Admin access required") -> None:
        super().__init__(message)


class InvalidCredentialsError(UnauthenticatedError):
    """Invalid email or password."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


# Validation Errors
class InvalidArgumentError(BlogSiteError):
    """A request field failed validation."""

    status_code = 400

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason, details={"field": field})


# Upstream AI Errors
class MisconfiguredError(BlogSiteError):
    """Required server configuration is missing."""

    status_code = 500

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"{setting} is not configured")


class RateLimitedError(BlogSiteError):
    """Upstream rejected the call with HTTP 429."""

    status_code = 429

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded. Please try again later.")


class QuotaExhaustedError(BlogSiteError):
    """Upstream rejected the call with HTTP 402."""

    status_code = 402

    def __init__(self) -> None:
        super().__init__("AI credits exhausted. Please add credits to your workspace.")


class UpstreamError(BlogSiteError):
    """Upstream failed with an unexpected status, timeout or reply shape."""

    status_code = 500

    def __init__(self, status: int | None, body: str = "") -> None:
        self.status = status
        self.body = body
        label = status if status is not None else "no response"
        super().__init__(f"AI gateway error: {label}", details={"status": status})


class GenerationCancelledError(BlogSiteError):
    """Caller went away before the upstream call completed."""

    status_code = 499

    def __init__(self) -> None:
        super().__init__("Generation cancelled")


# Data Errors
class PersistenceError(BlogSiteError):
    """The content store rejected a write."""

    status_code = 500


class DuplicateSlugError(PersistenceError):
    """A post with this slug already exists."""

    status_code = 409

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"A blog post with slug '{slug}' already exists")


class PostNotFoundError(BlogSiteError):
    """Blog post not found."""

    status_code = 404

    def __init__(self, slug: str) -> None:
        super().__init__(f"Blog post not found: {slug}")
