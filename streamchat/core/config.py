"""
Application configuration using Pydantic Settings.

Provider and auth switching is controlled by LLM_PROVIDER and AUTH_PROVIDER.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = True

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./streamchat.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "openrouter" | "openai"
    # - openrouter: OpenRouter (many hosted models, attribution headers)
    # - openai: any OpenAI-compatible /chat/completions endpoint
    LLM_PROVIDER: str = "openrouter"

    # Default model identifier (can be overridden per chat turn)
    LLM_MODEL: str = "mistralai/mistral-7b-instruct:free"
    LLM_MAX_TOKENS: int = 4096
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_SECONDS: float = 120.0

    # Models offered to the client model selector
    AVAILABLE_MODELS: List[dict[str, str]] = Field(
        default=[
            {"id": "mistralai/mistral-7b-instruct:free", "name": "Mistral 7B", "provider": "Mistral AI"},
            {"id": "google/gemma-3-1b-it:free", "name": "Gemma 3 1B", "provider": "Google"},
            {"id": "meta-llama/llama-3.2-3b-instruct:free", "name": "Llama 3.2 3B", "provider": "Meta"},
            {"id": "openchat/openchat-7b:free", "name": "OpenChat 7B", "provider": "OpenChat"},
        ]
    )

    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"

    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Sent to OpenRouter as attribution headers
    APP_URL: str = "http://localhost:3000"
    APP_TITLE: str = "AI Chat App"

    # ===========================================
    # Message encryption (at rest)
    # ===========================================
    # Empty disables encryption; stored content is then plaintext.
    ENCRYPTION_KEY: str = ""

    # ===========================================
    # Auth (OIDC/JWT)
    # ===========================================
    AUTH_PROVIDER: Literal["mock", "oidc"] = "mock"
    OIDC_ISSUER: str = ""
    OIDC_AUDIENCE: str = ""
    OIDC_JWKS_URL: str = ""
    OIDC_EMAIL_CLAIM: str = "email"
    OIDC_NAME_CLAIM: str = "name"
    OIDC_PICTURE_CLAIM: str = "picture"

    # ===========================================
    # Rate limiting (per user, fixed window)
    # ===========================================
    RATE_LIMIT_MAX_REQUESTS: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_CLEANUP_MINUTES: int = 5

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_test(self) -> bool:
        """Check if running under the test environment."""
        return self.ENVIRONMENT == "test"

    @property
    def encryption_enabled(self) -> bool:
        """Check if message encryption is configured."""
        return bool(self.ENCRYPTION_KEY)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
