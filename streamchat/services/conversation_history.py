"""
Conversation history assembly for prompt construction.
"""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

from streamchat.core.encryption import MessageCipher
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.models.chat import PromptMessage
from streamchat.models.conversation import Message
from streamchat.models.enums import MessageRole

SYSTEM_PROMPT = "You are a helpful AI assistant. Be concise and helpful."


class ConversationHistoryAssembler:
    """Loads a conversation's turns in stored order with content decoded."""

    def __init__(self, repo: IConversationRepository, cipher: MessageCipher):
        self._repo = repo
        self._cipher = cipher

    async def load_history(self, conversation_id: UUID) -> list[Message]:
        """Return every message of the conversation, oldest first, decoded.

        No filtering or truncation is applied.
        """
        messages = await self._repo.list_messages(conversation_id)
        return [self.decode_message(message) for message in messages]

    def decode_message(self, message: Message) -> Message:
        return message.model_copy(update={"content": self._cipher.decode(message.content)})

    @staticmethod
    def to_prompt(
        messages: Sequence[Message],
        system_prompt: str = SYSTEM_PROMPT,
    ) -> list[PromptMessage]:
        prompt = [PromptMessage(role=MessageRole.SYSTEM, content=system_prompt)]
        prompt.extend(PromptMessage(role=m.role, content=m.content) for m in messages)
        return prompt
