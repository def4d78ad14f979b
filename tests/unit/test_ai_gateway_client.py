"""Unit tests for the upstream chat-completions client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from app.config import settings
from app.core.exceptions import (
    MisconfiguredError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
)
from app.integrations.ai_gateway import ChatCompletionClient, ChatMessage

MESSAGES = [
    ChatMessage(role="system", content="persona"),
    ChatMessage(role="user", content="topic"),
]

_RealAsyncClient = httpx.AsyncClient


def _install_transport(
    monkeypatch: pytest.MonkeyPatch,
    handler: Any,
    captured: dict[str, Any] | None = None,
) -> None:
    def factory(**kwargs: Any) -> httpx.AsyncClient:
        if captured is not None:
            captured["init"] = kwargs
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr("app.integrations.ai_gateway.httpx.AsyncClient", factory)


@pytest.mark.asyncio
async def test_complete_posts_chat_payload_and_returns_first_choice(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["authorization"]
        captured["json"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": "hello"}}]},
        )

    _install_transport(monkeypatch, handler, captured)

    async with ChatCompletionClient(
        api_key="sk-test",
        url="https://ai.example.test/v1/chat/completions",
        model="test/model",
        timeout=5.0,
    ) as client:
        text = await client.complete(MESSAGES)

    assert text == "hello"
    assert captured["url"] == "https://ai.example.test/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-test"
    assert captured["init"]["timeout"] == 5.0
    assert captured["json"] == {
        "model": "test/model",
        "messages": [
            {"role": "system", "content": "persona"},
            {"role": "user", "content": "topic"},
        ],
        "temperature": settings.ai_temperature,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "error_type"),
    [(429, RateLimitedError), (402, QuotaExhaustedError)],
)
async def test_complete_maps_rate_limit_and_quota(
    monkeypatch: pytest.MonkeyPatch,
    status_code: int,
    error_type: type[Exception],
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json={"error": "nope"})

    _install_transport(monkeypatch, handler)

    async with ChatCompletionClient(api_key="sk-test") as client:
        with pytest.raises(error_type):
            await client.complete(MESSAGES)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_complete_other_status_carries_status_and_body(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_transport(monkeypatch, lambda request: httpx.Response(503, text="overloaded"))

    async with ChatCompletionClient(api_key="sk-test") as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.complete(MESSAGES)

    assert exc_info.value.status == 503
    assert exc_info.value.body == "overloaded"
    assert exc_info.value.message == "AI gateway error: 503"


@pytest.mark.asyncio
async def test_complete_timeout_is_upstream_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    _install_transport(monkeypatch, handler)

    async with ChatCompletionClient(api_key="sk-test") as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.complete(MESSAGES)

    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_complete_reply_without_choices_is_upstream_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_transport(monkeypatch, lambda request: httpx.Response(200, json={"choices": []}))

    async with ChatCompletionClient(api_key="sk-test") as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.complete(MESSAGES)

    assert exc_info.value.status == 200


def test_client_requires_api_key_from_settings() -> None:
    original_key = settings.ai_gateway_api_key
    try:
        settings.ai_gateway_api_key = None
        with pytest.raises(MisconfiguredError):
            ChatCompletionClient()
    finally:
        settings.ai_gateway_api_key = original_key


def test_client_requires_context_manager() -> None:
    client = ChatCompletionClient(api_key="sk-test")

    with pytest.raises(RuntimeError):
        _ = client.client
