"""
Conversations API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status

from streamchat.api.deps import Cipher, ConversationRepo, CurrentUser
from streamchat.core.exceptions import NotFoundError
from streamchat.models.conversation import (
    Conversation,
    ConversationUpdate,
    ConversationWithMessages,
)
from streamchat.services.conversation_service import ConversationService

router = APIRouter()


@router.get("", response_model=list[Conversation])
async def list_conversations(
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """List conversations, most recently updated first."""
    return await ConversationService(repo, cipher).list_conversations(user.id)


@router.post("", response_model=Conversation, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """Create an empty conversation."""
    return await ConversationService(repo, cipher).create_conversation(user.id)


@router.get("/{conversation_id}", response_model=ConversationWithMessages)
async def get_conversation(
    conversation_id: UUID,
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """Get a conversation with its messages."""
    try:
        return await ConversationService(repo, cipher).get_conversation_with_messages(
            user.id, conversation_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.patch("/{conversation_id}", response_model=Conversation)
async def rename_conversation(
    conversation_id: UUID,
    update: ConversationUpdate,
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """Rename a conversation."""
    try:
        return await ConversationService(repo, cipher).rename_conversation(
            user.id, conversation_id, update.title
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: UUID,
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """Delete a conversation and all of its messages."""
    try:
        await ConversationService(repo, cipher).delete_conversation(user.id, conversation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
