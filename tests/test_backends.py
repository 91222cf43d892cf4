from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from spamguard.adapters.anthropic_backend import API_URL, AnthropicBackend
from spamguard.adapters.errors import ProviderResponseError
from spamguard.adapters.openai_backend import OpenAIBackend


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_anthropic_request_and_reply() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"content": [{"type": "text", "text": ' {"isSpam": false} '}]},
        )

    backend = AnthropicBackend(api_key="sk-test", model="m-1", client=_client(handler))
    reply = asyncio.run(backend.complete("hello"))

    assert reply == '{"isSpam": false}'
    request = seen[0]
    assert str(request.url) == API_URL
    assert request.headers["x-api-key"] == "sk-test"
    assert "anthropic-version" in request.headers
    body = json.loads(request.content)
    assert body["model"] == "m-1"
    assert body["messages"] == [{"role": "user", "content": "hello"}]


def test_anthropic_http_error_raises() -> None:
    backend = AnthropicBackend(
        api_key="bad",
        client=_client(lambda request: httpx.Response(401, json={"error": "auth"})),
    )
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(backend.complete("hello"))


def test_anthropic_unexpected_shape_raises() -> None:
    backend = AnthropicBackend(
        api_key="k",
        client=_client(lambda request: httpx.Response(200, json={"content": []})),
    )
    with pytest.raises(ProviderResponseError):
        asyncio.run(backend.complete("hello"))


def test_openai_request_and_reply() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "{}\n"}}]})

    backend = OpenAIBackend(
        api_key="sk-oa",
        base_url="https://llm.example/v1/",
        client=_client(handler),
    )
    reply = asyncio.run(backend.complete("prompt"))

    assert reply == "{}"
    request = seen[0]
    assert str(request.url) == "https://llm.example/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-oa"
    assert json.loads(request.content)["messages"][0]["content"] == "prompt"


def test_openai_unexpected_shape_raises() -> None:
    backend = OpenAIBackend(
        api_key="k",
        client=_client(lambda request: httpx.Response(200, json={"choices": []})),
    )
    with pytest.raises(ProviderResponseError):
        asyncio.run(backend.complete("prompt"))
