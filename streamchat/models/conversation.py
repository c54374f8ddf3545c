"""
Conversation and message models.

Repositories return message content as stored (possibly encrypted); the
service layer decodes it before it leaves the application.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from streamchat.models.enums import MessageRole

DEFAULT_CONVERSATION_TITLE = "New Chat"


class ConversationBase(BaseModel):
    """Base conversation fields."""

    title: str = Field(DEFAULT_CONVERSATION_TITLE, max_length=255, description="Display title")


class Conversation(ConversationBase):
    """Conversation model."""

    id: UUID
    user_id: str = Field(..., description="Owner user ID")
    created_at: datetime
    updated_at: datetime


class ConversationUpdate(BaseModel):
    """Schema for renaming a conversation."""

    title: str = Field(..., min_length=1, max_length=255, description="New title")


class Message(BaseModel):
    """Chat message model."""

    id: UUID
    conversation_id: UUID
    role: MessageRole
    content: str = Field("", description="Message content")
    created_at: datetime


class ConversationWithMessages(Conversation):
    """Conversation together with its ordered messages."""

    messages: list[Message] = Field(default_factory=list)


class MessageSearchResult(Message):
    """Message matched by a search, with display context."""

    conversation_title: str = Field(..., description="Title of the owning conversation")
    snippet: str = Field(..., description="Excerpt around the first match")


class MessageSearchResponse(BaseModel):
    """Search response envelope."""

    results: list[MessageSearchResult] = Field(default_factory=list)

