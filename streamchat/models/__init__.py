"""Pydantic models (schemas) for the application."""

from streamchat.models.enums import MessageRole
from streamchat.models.chat import (
    AvailableModelsResponse,
    ChatRequest,
    ModelOption,
    PromptMessage,
)
from streamchat.models.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    Conversation,
    ConversationUpdate,
    ConversationWithMessages,
    Message,
    MessageSearchResponse,
    MessageSearchResult,
)
from streamchat.models.user import UserAccount, UserCreate, UserProfileUpdate

__all__ = [
    # Enums
    "MessageRole",
    # Chat
    "ChatRequest",
    "PromptMessage",
    "ModelOption",
    "AvailableModelsResponse",
    # Conversation
    "DEFAULT_CONVERSATION_TITLE",
    "Conversation",
    "ConversationUpdate",
    "ConversationWithMessages",
    "Message",
    "MessageSearchResult",
    "MessageSearchResponse",
    # User
    "UserAccount",
    "UserCreate",
    "UserProfileUpdate",
]
