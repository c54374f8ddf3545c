"""
Conversation repository interface.

Defines the contract for conversation and message persistence. Every
conversation lookup is scoped to its owner; a conversation owned by someone
else is indistinguishable from one that does not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from streamchat.models.conversation import Conversation, Message
from streamchat.models.enums import MessageRole


class IConversationRepository(ABC):
    """Abstract interface for conversation persistence."""

    @abstractmethod
    async def create(self, user_id: str, title: Optional[str] = None) -> Conversation:
        """
        Create an empty conversation.

        Args:
            user_id: Owner user ID
            title: Optional title (defaults to "New Chat")

        Returns:
            Conversation
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """
        Get a conversation owned by the user.

        Returns:
            Conversation, or None if absent or owned by someone else
        """
        pass

    @abstractmethod
    async def list(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Conversation]:
        """
        List conversations for a user, most recently updated first.

        Args:
            user_id: Owner user ID
            limit: Max conversations
            offset: Pagination offset

        Returns:
            List of conversations
        """
        pass

    @abstractmethod
    async def touch(
        self,
        user_id: str,
        conversation_id: UUID,
        title: Optional[str] = None,
    ) -> Conversation:
        """
        Bump updated_at, optionally replacing the title.

        Raises:
            NotFoundError: If the conversation is absent or not owned
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, conversation_id: UUID) -> bool:
        """
        Delete a conversation and all of its messages.

        Returns:
            True if deleted, False if absent or not owned
        """
        pass

    @abstractmethod
    async def add_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
    ) -> Message:
        """
        Append a message to a conversation.

        The caller has already verified ownership. Content is stored as given.
        """
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """List all messages of a conversation, oldest first."""
        pass

    @abstractmethod
    async def get_message_for_user(self, user_id: str, message_id: UUID) -> Optional[Message]:
        """
        Get a message whose conversation is owned by the user.

        Returns:
            Message, or None if absent or in someone else's conversation
        """
        pass

    @abstractmethod
    async def delete_message(self, message_id: UUID) -> bool:
        """Delete a single message."""
        pass

    @abstractmethod
    async def list_recent_messages_for_user(self, user_id: str, limit: int = 500) -> list[Message]:
        """List the user's newest messages across all conversations, newest first."""
        pass

    @abstractmethod
    async def get_titles(self, user_id: str, conversation_ids: Iterable[UUID]) -> dict[UUID, str]:
        """Map the given owned conversation IDs to their titles."""
        pass
