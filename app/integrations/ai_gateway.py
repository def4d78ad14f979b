"""Chat-completions client for the upstream AI text-generation gateway."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.config import settings
from app.core.exceptions import (
    MisconfiguredError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

# Upstream bodies are logged, never echoed to callers; keep log lines bounded
_MAX_LOGGED_BODY = 2000


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


class ChatCompletionClient:
    """Client for an OpenAI-compatible ``/chat/completions`` endpoint.

    Issues exactly one request per ``complete`` call; rate limiting and quota
    failures are surfaced immediately rather than retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.ai_gateway_api_key
        self.url = url or settings.ai_gateway_url
        self.model = model or settings.ai_model
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        self._client: httpx.AsyncClient | None = None

        if not self.api_key or not self.api_key.strip():
            raise MisconfiguredError("AI_GATEWAY_API_KEY")

    async def __aenter__(self) -> "ChatCompletionClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float | None = None,
    ) -> str:
        """Send one chat-completion request and return the first choice's text.

        Raises:
            RateLimitedError: upstream answered 429.
            QuotaExhaustedError: upstream answered 402.
            UpstreamError: any other non-2xx status, a timeout or transport
                failure, or a 2xx reply without message content.
        """
        payload = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": settings.ai_temperature if temperature is None else temperature,
        }
        logger.info("Calling AI gateway", extra={"model": self.model})

        try:
            response = await self.client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            logger.warning("AI gateway timed out", extra={"timeout": self.timeout})
            raise UpstreamError(None, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.warning("AI gateway HTTP error", extra={"error": str(e)})
            raise UpstreamError(None, str(e)) from e

        if response.status_code == 429:
            logger.error("AI gateway rate limit exceeded")
            raise RateLimitedError()
        if response.status_code == 402:
            logger.error("AI gateway payment required")
            raise QuotaExhaustedError()
        if not 200 <= response.status_code < 300:
            body = response.text
            logger.error(
                "AI gateway error",
                extra={"status": response.status_code, "body": body[:_MAX_LOGGED_BODY]},
            )
            raise UpstreamError(response.status_code, body)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            body = response.text
            logger.error(
                "AI gateway reply missing message content",
                extra={"body": body[:_MAX_LOGGED_BODY]},
            )
            raise UpstreamError(response.status_code, body) from e

        if not isinstance(content, str):
            raise UpstreamError(response.status_code, response.text)
        return content
