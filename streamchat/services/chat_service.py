"""
Chat service for streaming LLM responses into a conversation.

A chat turn persists the user message, streams the model output back to the
caller fragment by fragment, and stores the assistant message only once the
upstream stream has ended cleanly.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterator, Optional, Sequence
from uuid import UUID

from streamchat.core.encryption import MessageCipher
from streamchat.core.exceptions import (
    GenerationError,
    GenerationFailedError,
    ModelRateLimitedError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from streamchat.core.logger import logger
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.interfaces.llm_provider import ILLMProvider
from streamchat.interfaces.rate_limiter import IRateLimiter
from streamchat.models.chat import PromptMessage
from streamchat.models.enums import MessageRole
from streamchat.services.conversation_history import ConversationHistoryAssembler

TITLE_MAX_LENGTH = 50


def derive_conversation_title(content: str) -> str:
    """First 50 characters of the opening message, with an ellipsis if cut."""
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


def parse_conversation_id(conversation_id: str | UUID) -> UUID:
    if isinstance(conversation_id, UUID):
        return conversation_id
    try:
        return UUID(str(conversation_id))
    except ValueError as e:
        raise NotFoundError("Conversation not found") from e


class ChatService:
    """Coordinates one streamed chat turn."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        conversation_repo: IConversationRepository,
        cipher: MessageCipher,
        rate_limiter: Optional[IRateLimiter] = None,
    ):
        self._llm_provider = llm_provider
        self._repo = conversation_repo
        self._cipher = cipher
        self._rate_limiter = rate_limiter
        self._history = ConversationHistoryAssembler(conversation_repo, cipher)

    async def _consume_rate_limit(self, user_id: str) -> None:
        if not self._rate_limiter:
            return
        result = await self._rate_limiter.check(f"chat:{user_id}")
        if not result.allowed:
            logger.warning(f"Chat rate limit exceeded for user {user_id}")
            raise RateLimitExceededError(
                "Too many requests. Please try again later.",
                reset_in=result.reset_in,
            )

    async def handle_chat_turn(
        self,
        user_id: str,
        conversation_id: Optional[str],
        content: Optional[str],
        model_id: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Persist the user turn and open the response stream.

        Validation, ownership checks, the rate limit and the user message
        write happen before this coroutine returns. Only requests that pass
        validation count against the caller's budget. The returned iterator
        yields raw text fragments; exhausting it persists the assistant
        message.

        Raises:
            ValidationError: conversation_id or content missing
            NotFoundError: conversation absent or owned by someone else
            RateLimitExceededError: the caller's chat budget is used up
        """
        if not conversation_id or not content:
            raise ValidationError("Missing conversationId or content")

        conversation_uuid = parse_conversation_id(conversation_id)
        conversation = await self._repo.get(user_id, conversation_uuid)
        if not conversation:
            raise NotFoundError("Conversation not found")

        await self._consume_rate_limit(user_id)

        await self._repo.add_message(
            conversation.id,
            MessageRole.USER,
            self._cipher.encode(content),
        )

        history = await self._history.load_history(conversation.id)
        prompt = self._history.to_prompt(history)

        provider = self._llm_provider.with_model(model_id) if model_id else self._llm_provider

        return self._relay(
            user_id=user_id,
            conversation_id=conversation.id,
            content=content,
            history_length=len(history),
            provider=provider,
            prompt=prompt,
        )

    async def _relay(
        self,
        user_id: str,
        conversation_id: UUID,
        content: str,
        history_length: int,
        provider: ILLMProvider,
        prompt: Sequence[PromptMessage],
    ) -> AsyncIterator[str]:
        accumulated: list[str] = []
        try:
            async with aclosing(provider.stream_complete(prompt)) as stream:
                async for fragment in stream:
                    # Hand off before accumulating so the caller sees it first
                    yield fragment
                    accumulated.append(fragment)
        except GenerationError as e:
            if e.is_rate_limited:
                logger.warning(
                    f"Model {provider.get_model_name()} rate-limited "
                    f"(conversation={conversation_id}): {e.message}"
                )
                raise ModelRateLimitedError() from e
            logger.error(
                f"Generation failed [{e.category}] with {provider.get_model_name()} "
                f"(conversation={conversation_id}): {e.message}"
            )
            raise GenerationFailedError() from e
        except Exception as e:
            logger.exception(f"Unexpected generation failure (conversation={conversation_id}): {e}")
            raise GenerationFailedError() from e

        await self._repo.add_message(
            conversation_id,
            MessageRole.ASSISTANT,
            self._cipher.encode("".join(accumulated)),
        )

        title = derive_conversation_title(content) if history_length <= 1 else None
        await self._repo.touch(user_id, conversation_id, title=title)
        logger.debug(
            f"Stored assistant reply for conversation {conversation_id} "
            f"({len(accumulated)} fragments)"
        )
