"""AI blog generation endpoint."""

import asyncio
import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Header, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.v1.generation.constants import (
    CORS_HEADERS,
    DEGRADED_HEADER,
    DISCONNECT_POLL_INTERVAL,
)
from app.core.exceptions import BlogSiteError
from app.dependencies import GenerationGatewayDep
from app.schemas.blog import ErrorResponse, GenerateBlogResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected during blog generation")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def _read_json_body(request: Request) -> Any:
    """Return the decoded body, or ``None`` when it is not valid JSON."""
    raw = await request.body()
    try:
        return json.loads(raw) if raw else None
    except ValueError:
        return None


@router.options("/generate-blog", include_in_schema=False)
async def generate_blog_preflight() -> Response:
    """Answer CORS preflight with permissive headers."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.post(
    "/generate-blog",
    response_model=GenerateBlogResponse,
    responses={
        code: {"model": ErrorResponse}
        for code in (400, 401, 402, 403, 429, 500)
    },
    summary="Generate a blog draft with AI",
    description=(
        "Authenticate the bearer credential, require the admin role, then ask the "
        "upstream model for a `{title, excerpt, content}` draft. Nothing is saved."
    ),
)
async def generate_blog(
    request: Request,
    gateway: GenerationGatewayDep,
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Generate a blog post draft from a topic."""
    payload = await _read_json_body(request)

    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        result = await gateway.generate(authorization, payload, cancel_event=cancel_event)
    except BlogSiteError as exc:
        logger.warning(
            "Blog generation failed",
            extra={"error_type": type(exc).__name__, "status_code": exc.status_code},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=CORS_HEADERS,
        )
    except Exception:
        logger.exception("Unexpected blog generation error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Unknown error occurred"},
            headers=CORS_HEADERS,
        )
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)

    headers = dict(CORS_HEADERS)
    if result.degraded:
        headers[DEGRADED_HEADER] = "true"
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.to_payload(),
        headers=headers,
    )
