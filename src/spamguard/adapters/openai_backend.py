"""OpenAI-compatible chat completions backend (OpenAI, Groq and similar)."""

from __future__ import annotations

from typing import Optional

import httpx

from spamguard.adapters.errors import ProviderResponseError


class OpenAIBackend:
    """Classifier backend for OpenAI-compatible ``/chat/completions`` APIs."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        max_tokens: int = 150,
        timeout_seconds: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._endpoint = f"{base_url.rstrip('/')}/chat/completions"
        self._max_tokens = max_tokens
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def complete(self, prompt: str) -> str:
        response = await self._client.post(
            self._endpoint,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self._model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0,
                "max_tokens": self._max_tokens,
            },
        )
        response.raise_for_status()
        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseError(f"Unexpected chat completion shape: {data!r}") from exc
        if not isinstance(content, str):
            raise ProviderResponseError("Chat completion content is not text")
        return content.strip()

    async def aclose(self) -> None:
        await self._client.aclose()
