"""Abstract interfaces for infrastructure abstraction."""

from streamchat.interfaces.auth_provider import IAuthProvider
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.interfaces.llm_provider import ILLMProvider
from streamchat.interfaces.rate_limiter import IRateLimiter
from streamchat.interfaces.user_repository import IUserRepository

__all__ = [
    "IAuthProvider",
    "IConversationRepository",
    "ILLMProvider",
    "IRateLimiter",
    "IUserRepository",
]
