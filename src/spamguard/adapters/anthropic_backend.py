"""Anthropic Messages API backend.

Talks to the HTTP API directly through httpx so both providers share one
transport library and can be tested with ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import Optional

import httpx

from spamguard.adapters.errors import ProviderResponseError

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"


class AnthropicBackend:
    """Classifier backend for Anthropic models."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-haiku-4-5",
        max_tokens: int = 150,
        timeout_seconds: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def complete(self, prompt: str) -> str:
        response = await self._client.post(
            API_URL,
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": API_VERSION,
                "content-type": "application/json",
            },
            json={
                "model": self._model,
                "max_tokens": self._max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
        )
        response.raise_for_status()
        data = response.json()
        try:
            blocks = data["content"]
            text = next(block["text"] for block in blocks if block.get("type") == "text")
        except (KeyError, TypeError, StopIteration) as exc:
            raise ProviderResponseError(f"Unexpected Anthropic response shape: {data!r}") from exc
        return text.strip()

    async def aclose(self) -> None:
        await self._client.aclose()
