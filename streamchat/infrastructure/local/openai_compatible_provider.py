"""
OpenAI-compatible chat completions provider.

Talks to any endpoint that implements ``POST {base_url}/chat/completions``
with bearer auth, in both one-shot and streaming mode.
"""

from __future__ import annotations

import copy
from typing import Any, AsyncIterator, Optional, Sequence

import httpx

from streamchat.core.exceptions import ConfigurationError, GenerationError
from streamchat.core.logger import logger
from streamchat.interfaces.llm_provider import ILLMProvider
from streamchat.models.chat import PromptMessage
from streamchat.utils.sse import SSEDecoder, StreamDone, extract_delta_content

DEFAULT_MODEL = "mistralai/mistral-7b-instruct:free"


class OpenAICompatibleProvider(ILLMProvider):
    """Provider for OpenAI-compatible /chat/completions endpoints."""

    name = "openai"
    display_name = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        base_url: str = "https://api.openai.com/v1",
        max_tokens: int = 4096,
        temperature: float = 0.7,
        timeout_seconds: float = 120.0,
        available_models: Optional[list[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: Bearer credential for the endpoint
            model_name: Model identifier sent with each request
            base_url: API root, without the /chat/completions suffix
            max_tokens: Upper bound on generated tokens
            temperature: Sampling temperature
            timeout_seconds: Per-request timeout
            available_models: Model ids offered for selection
            transport: Optional httpx transport (used by tests)
        """
        if not api_key:
            raise ConfigurationError(f"{self.display_name} API key is required")

        self._api_key = api_key
        self._model_name = model_name or DEFAULT_MODEL
        self._base_url = base_url.rstrip("/")
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = httpx.Timeout(timeout_seconds)
        self._available_models = list(available_models or [self._model_name])
        self._transport = transport

    @property
    def completions_url(self) -> str:
        return f"{self._base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: Sequence[PromptMessage], stream: bool) -> dict[str, Any]:
        return {
            "model": self._model_name,
            "messages": [message.to_wire() for message in messages],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "stream": stream,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _status_error(self, status_code: int, body: str) -> GenerationError:
        category = "rate_limit" if status_code == 429 else "http"
        return GenerationError(
            f"{self.display_name} API error: {status_code} - {body}",
            status_code=status_code,
            category=category,
        )

    def _event_error(self, payload: dict[str, Any]) -> Optional[GenerationError]:
        """Map an in-band ``{"error": {...}}`` event to a GenerationError."""
        error = payload.get("error")
        if not error:
            return None
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message") or str(error)
        else:
            code, message = None, str(error)
        status_code = code if isinstance(code, int) else None
        return GenerationError(
            f"{self.display_name} stream error: {message}",
            status_code=status_code,
            category="rate_limit" if status_code == 429 else "protocol",
        )

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        try:
            async with self._client() as client:
                response = await client.post(
                    self.completions_url,
                    headers=self._headers(),
                    json=self._payload(messages, stream=False),
                )
        except httpx.HTTPError as e:
            raise GenerationError(
                f"{self.display_name} request failed: {e}", category="network"
            ) from e

        if not response.is_success:
            raise self._status_error(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(
                f"{self.display_name} returned invalid JSON", category="protocol"
            ) from e
        choices = data.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""

    async def stream_complete(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        logger.debug(f"Opening {self.name} stream with model {self._model_name}")
        decoder = SSEDecoder()
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    self.completions_url,
                    headers=self._headers(),
                    json=self._payload(messages, stream=True),
                ) as response:
                    if not response.is_success:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        raise self._status_error(response.status_code, body)

                    try:
                        async for text in response.aiter_text():
                            for payload in decoder.feed(text):
                                error = self._event_error(payload)
                                if error:
                                    raise error
                                fragment = extract_delta_content(payload)
                                if fragment:
                                    yield fragment
                        for payload in decoder.flush():
                            fragment = extract_delta_content(payload)
                            if fragment:
                                yield fragment
                    except StreamDone:
                        return
        except httpx.HTTPError as e:
            raise GenerationError(
                f"{self.display_name} stream failed: {e}", category="network"
            ) from e

    def get_model_name(self) -> str:
        return self._model_name

    def get_available_models(self) -> list[str]:
        return list(self._available_models)

    def with_model(self, model_id: str) -> "OpenAICompatibleProvider":
        if not model_id or model_id == self._model_name:
            return self
        clone = copy.copy(self)
        clone._model_name = model_id
        return clone
