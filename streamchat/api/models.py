"""
Available models endpoint.

Returns the list of selectable AI models for the current LLM provider.
"""

import time
from typing import Any

import httpx
from fastapi import APIRouter

from streamchat.api.deps import CurrentUser, LLMProvider
from streamchat.core.config import get_settings
from streamchat.core.logger import logger
from streamchat.models.chat import AvailableModelsResponse, ModelOption

router = APIRouter()

# Simple in-memory cache for models listed by an OpenAI-compatible endpoint
_remote_models_cache: dict[str, Any] = {
    "models": [],
    "fetched_at": 0.0,
}
_REMOTE_CACHE_TTL = 300  # 5 minutes


async def _fetch_remote_models(transport: httpx.AsyncBaseTransport | None = None) -> list[ModelOption]:
    """Fetch available models from the OpenAI-compatible /models endpoint."""
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        return []

    now = time.time()
    if (
        _remote_models_cache["models"]
        and now - _remote_models_cache["fetched_at"] < _REMOTE_CACHE_TTL
    ):
        return _remote_models_cache["models"]

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.get(
                f"{settings.OPENAI_BASE_URL.rstrip('/')}/models",
                headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
            )
            resp.raise_for_status()
            data = resp.json()

        # OpenAI-compatible format: { "data": [{"id": "model-name", ...}, ...] }
        result = [
            ModelOption(id=m["id"], name=m["id"], provider=m.get("owned_by", ""))
            for m in data.get("data", [])
            if m.get("id")
        ]

        _remote_models_cache["models"] = result
        _remote_models_cache["fetched_at"] = now
        return result

    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch models from {settings.OPENAI_BASE_URL}: {e}")
        return _remote_models_cache["models"]


def _configured_models() -> list[ModelOption]:
    return [ModelOption(**m) for m in get_settings().AVAILABLE_MODELS]


@router.get("", response_model=AvailableModelsResponse)
async def list_available_models(
    user: CurrentUser,
    llm_provider: LLMProvider,
):
    """List available AI models for model selection."""
    settings = get_settings()

    models = _configured_models()
    if settings.LLM_PROVIDER == "openai":
        models = await _fetch_remote_models() or models

    if not models:
        models = [ModelOption(id=m, name=m) for m in llm_provider.get_available_models()]

    return AvailableModelsResponse(
        provider=llm_provider.name,
        default_model_id=llm_provider.get_model_name(),
        models=models,
    )
