"""
OpenRouter provider.

OpenRouter exposes many hosted models behind an OpenAI-compatible API and
asks callers to identify their application with attribution headers.
"""

from typing import Optional

import httpx

from streamchat.infrastructure.local.openai_compatible_provider import (
    DEFAULT_MODEL,
    OpenAICompatibleProvider,
)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter chat completions provider."""

    name = "openrouter"
    display_name = "OpenRouter"

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        base_url: str = OPENROUTER_BASE_URL,
        app_url: str = "http://localhost:3000",
        app_title: str = "AI Chat App",
        max_tokens: int = 4096,
        temperature: float = 0.7,
        timeout_seconds: float = 120.0,
        available_models: Optional[list[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key,
            model_name=model_name,
            base_url=base_url,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout_seconds=timeout_seconds,
            available_models=available_models,
            transport=transport,
        )
        self._app_url = app_url
        self._app_title = app_title

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["HTTP-Referer"] = self._app_url
        headers["X-Title"] = self._app_title
        return headers
