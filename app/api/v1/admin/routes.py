"""Admin blog authoring endpoints."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, status

from app.dependencies import (
    AdminIdentity,
    BearerCredential,
    ContentServiceDep,
    GenerationGatewayDep,
)
from app.schemas.blog import (
    AdminStatsResponse,
    BlogDraftPayload,
    BlogPostResponse,
    BlogSaveResponse,
    ComposeBlogRequest,
)
from app.services.blog_composer import BlogComposer, BlogDraft
from app.services.blog_generation import GenerationResult, parse_generation_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/blogs/compose", response_model=BlogDraftPayload)
async def compose_blog(
    request_data: ComposeBlogRequest,
    admin: AdminIdentity,
    content_service: ContentServiceDep,
    gateway: GenerationGatewayDep,
) -> BlogDraftPayload:
    """Fill a draft with an AI generation; the draft is returned, not saved."""

    async def generator(topic: str, tone: str) -> GenerationResult:
        request = parse_generation_request({"topic": topic, "tone": tone})
        return await gateway.generate_for(request)

    seed = request_data.draft or BlogDraftPayload()
    composer = BlogComposer(content_service, generator, draft=BlogDraft(**seed.model_dump()))
    await composer.generate(request_data.topic, request_data.tone)

    logger.info("Admin composed draft", extra={"user_id": admin.id, "slug": composer.draft.slug})
    return BlogDraftPayload(**asdict(composer.draft))


@router.post("/blogs", response_model=BlogSaveResponse, status_code=status.HTTP_201_CREATED)
async def create_blog(
    draft: BlogDraftPayload,
    admin: AdminIdentity,
    credential: BearerCredential,
    content_service: ContentServiceDep,
) -> BlogSaveResponse:
    """Validate and persist a blog post authored by the current admin."""
    composer = BlogComposer(content_service, draft=BlogDraft(**draft.model_dump()))
    result = await composer.save(credential)

    return BlogSaveResponse(
        post=BlogPostResponse.model_validate(result.post),
        message=result.message,
        redirect_to=result.redirect_to,
    )


@router.get("/stats", response_model=AdminStatsResponse)
async def admin_stats(
    admin: AdminIdentity,
    content_service: ContentServiceDep,
) -> AdminStatsResponse:
    """Dashboard counters."""
    counts = await content_service.count_by_status()
    return AdminStatsResponse(total_posts=sum(counts.values()), by_status=counts)
