"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ChatAppError(Exception):
    """Base exception for streamchat."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ChatAppError):
    """Resource not found (or not owned by the caller)."""

    pass


class ValidationError(ChatAppError):
    """Validation error."""

    pass


class AuthenticationError(ChatAppError):
    """Authentication failed."""

    pass


class ConfigurationError(ChatAppError):
    """Required configuration is missing or invalid."""

    pass


class RateLimitExceededError(ChatAppError):
    """Caller exceeded the per-user request budget."""

    def __init__(self, message: str, reset_in: int):
        super().__init__(message, details={"reset_in": reset_in})
        self.reset_in = reset_in


class LLMError(ChatAppError):
    """LLM-related error."""

    pass


class GenerationError(LLMError):
    """Upstream text generation failed.

    Raised by providers. ``status_code`` is the upstream HTTP status when one
    was received; ``category`` is one of ``http``, ``rate_limit``, ``network``
    or ``protocol``.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        category: str = "http",
    ):
        super().__init__(message, details={"status_code": status_code, "category": category})
        self.status_code = status_code
        self.category = category

    @property
    def is_rate_limited(self) -> bool:
        """Check whether the upstream signalled rate limiting."""
        if self.category == "rate_limit" or self.status_code == 429:
            return True
        lowered = self.message.lower()
        return "429" in lowered or "rate-limited" in lowered or "rate limit" in lowered


class ModelRateLimitedError(LLMError):
    """The selected model is rate-limited upstream; the user should pick another."""

    def __init__(self, message: str = "Model is rate-limited. Please try a different model."):
        super().__init__(message)


class GenerationFailedError(LLMError):
    """Generic generation failure surfaced to the user."""

    def __init__(self, message: str = "Failed to generate a response. Please try a different model."):
        super().__init__(message)
