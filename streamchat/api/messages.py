"""
Message API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status

from streamchat.api.deps import Cipher, ConversationRepo, CurrentUser
from streamchat.core.exceptions import NotFoundError, ValidationError
from streamchat.models.conversation import MessageSearchResponse
from streamchat.services.conversation_service import ConversationService
from streamchat.services.message_search_service import MessageSearchService

router = APIRouter()


@router.get("/search", response_model=MessageSearchResponse)
async def search_messages(
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
    q: Optional[str] = Query(None, max_length=200, description="Search query"),
):
    """Search the caller's messages (case-insensitive)."""
    try:
        results = await MessageSearchService(repo, cipher).search(user.id, q)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return MessageSearchResponse(results=results)


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: UUID,
    user: CurrentUser,
    repo: ConversationRepo,
    cipher: Cipher,
):
    """Delete a single message from one of the caller's conversations."""
    try:
        await ConversationService(repo, cipher).delete_message(user.id, message_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
