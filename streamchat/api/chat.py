"""
Chat API endpoint.

Streams the assistant reply as raw text chunks. A clean end of the body is
the only success signal; a generation failure aborts the response instead.
"""

from contextlib import aclosing
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from streamchat.api.deps import Cipher, ConversationRepo, CurrentUser, LLMProvider, RateLimiter
from streamchat.core.exceptions import (
    GenerationFailedError,
    ModelRateLimitedError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from streamchat.core.logger import logger
from streamchat.models.chat import ChatRequest
from streamchat.services.chat_service import ChatService

router = APIRouter()


@router.post("")
async def chat(
    request: ChatRequest,
    user: CurrentUser,
    llm_provider: LLMProvider,
    conversation_repo: ConversationRepo,
    cipher: Cipher,
    rate_limiter: RateLimiter,
):
    """
    Send a message and stream the assistant reply.

    Returns a chunked ``text/plain`` body with no framing. Upstream failures,
    including ones before the first chunk, terminate the body with an error.
    """
    chat_service = ChatService(
        llm_provider=llm_provider,
        conversation_repo=conversation_repo,
        cipher=cipher,
        rate_limiter=rate_limiter,
    )

    try:
        stream = await chat_service.handle_chat_turn(
            user_id=user.id,
            conversation_id=request.conversation_id,
            content=request.content,
            model_id=request.model,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RateLimitExceededError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=e.message,
            headers={"Retry-After": str(e.reset_in)},
        )

    async def body() -> AsyncGenerator[str, None]:
        async with aclosing(stream):
            try:
                async for chunk in stream:
                    yield chunk
            except (ModelRateLimitedError, GenerationFailedError) as e:
                logger.warning(f"Aborting chat stream for user {user.id}: {e.message}")
                raise

    return StreamingResponse(
        body(),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable buffering for nginx
        },
    )
