"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from app.config import settings
from app.core.exceptions import InvalidCredentialsError
from app.core.security import create_access_token, verify_password
from app.dependencies import ContentServiceDep, CurrentIdentity, DbSession
from app.models.user import User
from app.schemas.auth import SessionResponse, Token, UserLogin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, session: DbSession) -> Token:
    """Login and get an access token."""
    logger.info("Login attempt", extra={"email": credentials.email})

    result = await session.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if (
        not user
        or not user.hashed_password
        or not verify_password(credentials.password, user.hashed_password)
    ):
        logger.warning("Login failed: invalid credentials", extra={"email": credentials.email})
        raise InvalidCredentialsError()

    if not user.is_active:
        logger.warning("Login failed: inactive user", extra={"email": credentials.email})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    access_token = create_access_token(subject=str(user.id))

    logger.info("Login successful", extra={"user_id": str(user.id)})

    return Token(access_token=access_token)


@router.get("/me", response_model=SessionResponse)
async def me(identity: CurrentIdentity, content_service: ContentServiceDep) -> SessionResponse:
    """Current identity with UI capabilities.

    ``is_admin`` only drives navigation in the admin UI; admin routes repeat
    the role check on every request.
    """
    is_admin = await content_service.has_role(identity.id, settings.admin_role)
    return SessionResponse(
        id=identity.id,
        email=identity.email,
        full_name=identity.full_name,
        is_admin=is_admin,
    )
