"""FastAPI dependencies shared across routes."""

import logging
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_session
from app.core.exceptions import ForbiddenError
from app.core.security import extract_bearer_token
from app.services.blog_generation import BlogGenerationGateway
from app.services.content_service import ContentService, Identity, SqlContentService

logger = logging.getLogger(__name__)

DbSession = Annotated[AsyncSession, Depends(get_session)]


def get_content_service(session: DbSession) -> ContentService:
    """Per-request content service bound to the request's session."""
    return SqlContentService(session)


ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]


def get_blog_generation_gateway(content_service: ContentServiceDep) -> BlogGenerationGateway:
    return BlogGenerationGateway(content_service)


GenerationGatewayDep = Annotated[BlogGenerationGateway, Depends(get_blog_generation_gateway)]


def get_bearer_credential(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    return extract_bearer_token(authorization)


BearerCredential = Annotated[str, Depends(get_bearer_credential)]


async def get_current_identity(
    credential: BearerCredential,
    content_service: ContentServiceDep,
) -> Identity:
    return await content_service.get_identity(credential)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]


async def require_admin(
    identity: CurrentIdentity,
    content_service: ContentServiceDep,
) -> Identity:
    """Server-side admin check; the actual security boundary for admin routes."""
    if not await content_service.has_role(identity.id, settings.admin_role):
        logger.warning("Admin route denied", extra={"user_id": identity.id})
        raise ForbiddenError()
    return identity


AdminIdentity = Annotated[Identity, Depends(require_admin)]
