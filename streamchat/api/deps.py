"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from streamchat.core.config import get_settings
from streamchat.core.encryption import MessageCipher, get_message_cipher
from streamchat.core.exceptions import ConfigurationError
from streamchat.core.logger import logger
from streamchat.interfaces.auth_provider import IAuthProvider, User
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.interfaces.llm_provider import ILLMProvider
from streamchat.interfaces.rate_limiter import IRateLimiter
from streamchat.interfaces.user_repository import IUserRepository


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_conversation_repository() -> IConversationRepository:
    """Get conversation repository instance."""
    from streamchat.infrastructure.local.conversation_repository import SqliteConversationRepository

    return SqliteConversationRepository()


@lru_cache()
def get_user_repository() -> IUserRepository:
    """Get user repository instance."""
    from streamchat.infrastructure.local.user_repository import SqliteUserRepository

    return SqliteUserRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def build_llm_provider() -> ILLMProvider:
    """
    Build the LLM provider selected by LLM_PROVIDER.

    Supports:
    - openrouter: OpenRouter (attribution headers, many hosted models)
    - openai: any OpenAI-compatible /chat/completions endpoint

    Raises:
        ConfigurationError: unknown provider or missing API key
    """
    settings = get_settings()
    available_models = [m["id"] for m in settings.AVAILABLE_MODELS if m.get("id")]

    if settings.LLM_PROVIDER == "openrouter":
        from streamchat.infrastructure.local.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(
            api_key=settings.OPENROUTER_API_KEY,
            model_name=settings.LLM_MODEL,
            base_url=settings.OPENROUTER_BASE_URL,
            app_url=settings.APP_URL,
            app_title=settings.APP_TITLE,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            available_models=available_models,
        )

    elif settings.LLM_PROVIDER == "openai":
        from streamchat.infrastructure.local.openai_compatible_provider import (
            OpenAICompatibleProvider,
        )

        return OpenAICompatibleProvider(
            api_key=settings.OPENAI_API_KEY,
            model_name=settings.LLM_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            available_models=available_models,
        )

    else:
        raise ConfigurationError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


def get_llm_provider() -> ILLMProvider:
    """Get LLM provider instance, reporting misconfiguration as a 500."""
    try:
        return build_llm_provider()
    except ConfigurationError as e:
        logger.error(f"LLM provider misconfigured: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="LLM provider is not configured",
        )


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "oidc":
        from streamchat.infrastructure.auth.oidc_auth import OidcAuthProvider

        return OidcAuthProvider(settings, get_user_repository())

    from streamchat.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider()


@lru_cache()
def get_rate_limiter() -> IRateLimiter:
    """Get the process-wide rate limiter."""
    settings = get_settings()
    from streamchat.infrastructure.local.rate_limiter import InMemoryRateLimiter

    return InMemoryRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def get_cipher() -> MessageCipher:
    """Get the message content cipher."""
    return get_message_cipher()


# ===========================================
# Authentication Dependencies
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With mock auth the bearer token is the user ID; with OIDC it is a JWT
    validated against the issuer's JWKS.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ConversationRepo = Annotated[IConversationRepository, Depends(get_conversation_repository)]
UserRepo = Annotated[IUserRepository, Depends(get_user_repository)]
LLMProvider = Annotated[ILLMProvider, Depends(get_llm_provider)]
RateLimiter = Annotated[IRateLimiter, Depends(get_rate_limiter)]
Cipher = Annotated[MessageCipher, Depends(get_cipher)]
CurrentUser = Annotated[User, Depends(get_current_user)]
