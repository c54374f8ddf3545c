"""
Chat model definitions.

Models for the streaming chat endpoint and for prompts sent to the LLM.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from streamchat.models.enums import MessageRole


class ChatRequest(BaseModel):
    """Request model for the chat endpoint.

    Fields are optional so that missing values are reported by the chat
    service as a 400 instead of a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("conversationId", "conversation_id"),
        description="Conversation to append the turn to",
    )
    content: Optional[str] = Field(None, description="User message text")
    model: Optional[str] = Field(None, max_length=200, description="Model override")


class PromptMessage(BaseModel):
    """Role-tagged message sent to the text-generation backend."""

    role: MessageRole
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ModelOption(BaseModel):
    """Selectable model."""

    id: str
    name: str
    provider: str = ""


class AvailableModelsResponse(BaseModel):
    """Models endpoint response."""

    provider: str
    default_model_id: str
    models: list[ModelOption] = Field(default_factory=list)
