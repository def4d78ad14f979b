"""JWT authentication and password hashing utilities."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt()
    ).decode("utf-8")


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    logger.info("Creating access token", extra={"subject": subject})
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode: dict[str, Any] = {
        "sub": subject,
        "exp": expire,
        "type": "access",
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_access_token(token: str) -> str:
    """Verify an access token and return the subject (user_id)."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise UnauthenticatedError() from e

    if payload.get("type") != "access":
        logger.warning("Token type mismatch", extra={"got": payload.get("type")})
        raise UnauthenticatedError()

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.warning("Token missing subject")
        raise UnauthenticatedError()

    return subject


def extract_bearer_token(authorization: str | None) -> str:
    """Return the credential from an ``Authorization`` header value.

    A bare token without the ``Bearer`` scheme is accepted as-is.
    """
    if authorization is None or not authorization.strip():
        raise UnauthenticatedError("Unauthorized - No authorization header")

    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = rest.strip()
    if not value:
        raise UnauthenticatedError()
    return value
