"""
SQLite implementation of Conversation repository.
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import and_, delete, select

from streamchat.core.exceptions import NotFoundError
from streamchat.infrastructure.local.database import ConversationORM, MessageORM, get_session_factory
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.models.conversation import DEFAULT_CONVERSATION_TITLE, Conversation, Message
from streamchat.models.enums import MessageRole
from streamchat.utils.datetime_utils import now_utc


class SqliteConversationRepository(IConversationRepository):
    """SQLite implementation of conversation repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _conversation_orm_to_model(self, orm: ConversationORM) -> Conversation:
        """Convert conversation ORM object to Pydantic model."""
        return Conversation(
            id=UUID(orm.id),
            user_id=orm.user_id,
            title=orm.title or DEFAULT_CONVERSATION_TITLE,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _message_orm_to_model(self, orm: MessageORM) -> Message:
        """Convert message ORM object to Pydantic model."""
        return Message(
            id=UUID(orm.id),
            conversation_id=UUID(orm.conversation_id),
            role=MessageRole(orm.role),
            content=orm.content or "",
            created_at=orm.created_at,
        )

    def _owned_conversation_query(self, user_id: str, conversation_id: UUID):
        return select(ConversationORM).where(
            and_(
                ConversationORM.id == str(conversation_id),
                ConversationORM.user_id == user_id,
            )
        )

    async def create(self, user_id: str, title: Optional[str] = None) -> Conversation:
        """Create an empty conversation."""
        async with self._session_factory() as session:
            now = now_utc()
            orm = ConversationORM(
                user_id=user_id,
                title=title or DEFAULT_CONVERSATION_TITLE,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._conversation_orm_to_model(orm)

    async def get(self, user_id: str, conversation_id: UUID) -> Optional[Conversation]:
        """Get a conversation owned by the user."""
        async with self._session_factory() as session:
            result = await session.execute(self._owned_conversation_query(user_id, conversation_id))
            orm = result.scalar_one_or_none()
            return self._conversation_orm_to_model(orm) if orm else None

    async def list(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Conversation]:
        """List conversations for a user."""
        async with self._session_factory() as session:
            query = (
                select(ConversationORM)
                .where(ConversationORM.user_id == user_id)
                .order_by(ConversationORM.updated_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return [self._conversation_orm_to_model(orm) for orm in result.scalars().all()]

    async def touch(
        self,
        user_id: str,
        conversation_id: UUID,
        title: Optional[str] = None,
    ) -> Conversation:
        """Bump updated_at, optionally replacing the title."""
        async with self._session_factory() as session:
            result = await session.execute(self._owned_conversation_query(user_id, conversation_id))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"Conversation {conversation_id} not found")

            orm.updated_at = now_utc()
            if title is not None:
                orm.title = title

            await session.commit()
            await session.refresh(orm)
            return self._conversation_orm_to_model(orm)

    async def delete(self, user_id: str, conversation_id: UUID) -> bool:
        """Delete a conversation and its messages."""
        async with self._session_factory() as session:
            result = await session.execute(self._owned_conversation_query(user_id, conversation_id))
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            await session.execute(
                delete(MessageORM).where(MessageORM.conversation_id == str(conversation_id))
            )
            await session.delete(orm)
            await session.commit()
            return True

    async def add_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
    ) -> Message:
        """Append a message to a conversation."""
        async with self._session_factory() as session:
            message_orm = MessageORM(
                conversation_id=str(conversation_id),
                role=role.value,
                content=content or "",
                created_at=now_utc(),
            )
            session.add(message_orm)

            await session.commit()
            await session.refresh(message_orm)
            return self._message_orm_to_model(message_orm)

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """List messages for a conversation, oldest first."""
        async with self._session_factory() as session:
            query = (
                select(MessageORM)
                .where(MessageORM.conversation_id == str(conversation_id))
                .order_by(MessageORM.created_at.asc())
            )
            result = await session.execute(query)
            return [self._message_orm_to_model(orm) for orm in result.scalars().all()]

    async def get_message_for_user(self, user_id: str, message_id: UUID) -> Optional[Message]:
        """Get a message whose conversation is owned by the user."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MessageORM)
                .join(ConversationORM, ConversationORM.id == MessageORM.conversation_id)
                .where(
                    and_(
                        MessageORM.id == str(message_id),
                        ConversationORM.user_id == user_id,
                    )
                )
            )
            orm = result.scalar_one_or_none()
            return self._message_orm_to_model(orm) if orm else None

    async def delete_message(self, message_id: UUID) -> bool:
        """Delete a single message."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(MessageORM).where(MessageORM.id == str(message_id))
            )
            await session.commit()
            return result.rowcount > 0

    async def list_recent_messages_for_user(self, user_id: str, limit: int = 500) -> list[Message]:
        """List the user's newest messages across all conversations."""
        async with self._session_factory() as session:
            query = (
                select(MessageORM)
                .join(ConversationORM, ConversationORM.id == MessageORM.conversation_id)
                .where(ConversationORM.user_id == user_id)
                .order_by(MessageORM.created_at.desc())
                .limit(limit)
            )
            result = await session.execute(query)
            return [self._message_orm_to_model(orm) for orm in result.scalars().all()]

    async def get_titles(self, user_id: str, conversation_ids: Iterable[UUID]) -> dict[UUID, str]:
        """Titles for the given conversations, restricted to the owner."""
        ids = {str(conversation_id) for conversation_id in conversation_ids}
        if not ids:
            return {}
        async with self._session_factory() as session:
            query = select(ConversationORM.id, ConversationORM.title).where(
                and_(ConversationORM.user_id == user_id, ConversationORM.id.in_(ids))
            )
            result = await session.execute(query)
            return {UUID(row.id): row.title for row in result.all()}
