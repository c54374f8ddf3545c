"""
Conversation management service.

Owner-scoped CRUD over conversations and their messages. Message content
leaves this service decoded.
"""

from __future__ import annotations

from uuid import UUID

from streamchat.core.encryption import MessageCipher
from streamchat.core.exceptions import NotFoundError
from streamchat.core.logger import logger
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.models.conversation import Conversation, ConversationWithMessages
from streamchat.services.conversation_history import ConversationHistoryAssembler


class ConversationService:
    """Service for listing, reading, renaming and deleting conversations."""

    def __init__(self, conversation_repo: IConversationRepository, cipher: MessageCipher):
        self._repo = conversation_repo
        self._history = ConversationHistoryAssembler(conversation_repo, cipher)

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        return await self._repo.list(user_id)

    async def create_conversation(self, user_id: str) -> Conversation:
        conversation = await self._repo.create(user_id)
        logger.debug(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    async def get_conversation(self, user_id: str, conversation_id: UUID) -> Conversation:
        conversation = await self._repo.get(user_id, conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    async def get_conversation_with_messages(
        self,
        user_id: str,
        conversation_id: UUID,
    ) -> ConversationWithMessages:
        conversation = await self.get_conversation(user_id, conversation_id)
        messages = await self._history.load_history(conversation.id)
        return ConversationWithMessages(**conversation.model_dump(), messages=messages)

    async def rename_conversation(
        self,
        user_id: str,
        conversation_id: UUID,
        title: str,
    ) -> Conversation:
        return await self._repo.touch(user_id, conversation_id, title=title)

    async def delete_conversation(self, user_id: str, conversation_id: UUID) -> None:
        deleted = await self._repo.delete(user_id, conversation_id)
        if not deleted:
            raise NotFoundError("Conversation not found")
        logger.info(f"Deleted conversation {conversation_id}")

    async def delete_message(self, user_id: str, message_id: UUID) -> None:
        """Delete a message from one of the user's conversations."""
        message = await self._repo.get_message_for_user(user_id, message_id)
        if not message:
            raise NotFoundError("Message not found")
        await self._repo.delete_message(message.id)
