"""
Client-side consumer for the streaming chat endpoint.

Keeps a local transcript the way a chat UI does: the user's message is shown
immediately, the assistant's reply grows in ``streaming_content`` while it
arrives, and it joins the transcript only after the stream closes cleanly.
Errors are kept in ``error`` and never written into the transcript.
"""

from __future__ import annotations

import json
from typing import Callable, Optional
from uuid import UUID, uuid4

import httpx

from streamchat.models.conversation import Message
from streamchat.models.enums import MessageRole
from streamchat.utils.datetime_utils import now_utc

RATE_LIMITED_MESSAGE = "The selected model is currently rate-limited. Please try a different model."
UNAVAILABLE_MESSAGE = "The selected model is temporarily unavailable. Please try a different model."
DEFAULT_ERROR_MESSAGE = "Failed to get AI response"
INTERRUPTED_MESSAGE = "The response was interrupted. Please try a different model."


def describe_error_response(status_code: int, body: str) -> str:
    """Map a failed chat response to a user-facing message."""
    if status_code == 429:
        return RATE_LIMITED_MESSAGE
    if status_code in (502, 503):
        return UNAVAILABLE_MESSAGE
    if "rate-limited" in body or "429" in body:
        return RATE_LIMITED_MESSAGE
    if not body:
        return DEFAULT_ERROR_MESSAGE
    try:
        parsed = json.loads(body)
    except ValueError:
        return body[:200]
    if isinstance(parsed, dict):
        detail = parsed.get("detail") or parsed.get("error") or parsed.get("message")
        if isinstance(detail, str) and detail:
            return detail
    return DEFAULT_ERROR_MESSAGE


class ChatStreamConsumer:
    """Stateful chat client for one signed-in user."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

        self.model = model
        self.messages: list[Message] = []
        self.is_loading = False
        self.is_streaming = False
        self.streaming_content = ""
        self.error: Optional[str] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    def _local_message(self, conversation_id: str, role: MessageRole, content: str) -> Message:
        return Message(
            id=uuid4(),
            conversation_id=UUID(conversation_id),
            role=role,
            content=content,
            created_at=now_utc(),
        )

    def clear(self) -> None:
        self.messages = []
        self.streaming_content = ""
        self.error = None

    async def fetch_messages(self, conversation_id: str) -> None:
        """Replace the local transcript with the stored one."""
        self.is_loading = True
        self.error = None
        try:
            async with self._client() as client:
                response = await client.get(f"/api/conversations/{conversation_id}")
            if not response.is_success:
                self.error = "Failed to fetch messages"
                return
            data = response.json()
            self.messages = [Message.model_validate(m) for m in data.get("messages", [])]
        except httpx.HTTPError as e:
            self.error = str(e) or DEFAULT_ERROR_MESSAGE
        finally:
            self.is_loading = False

    async def send_message(
        self,
        conversation_id: str,
        content: str,
        on_chunk: Optional[Callable[[str], None]] = None,
    ) -> Optional[Message]:
        """
        Send a user turn and consume the streamed reply.

        Returns the assistant message on a clean close, or None when the
        request failed (see ``error``).
        """
        self.messages.append(self._local_message(conversation_id, MessageRole.USER, content))
        self.is_streaming = True
        self.streaming_content = ""
        self.error = None

        payload = {"conversationId": conversation_id, "content": content}
        if self.model:
            payload["model"] = self.model

        try:
            async with self._client() as client:
                async with client.stream("POST", "/api/chat", json=payload) as response:
                    if not response.is_success:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        self.error = describe_error_response(response.status_code, body)
                        return None

                    async for chunk in response.aiter_text():
                        self.streaming_content += chunk
                        if on_chunk:
                            on_chunk(chunk)
        except httpx.HTTPError:
            self.error = INTERRUPTED_MESSAGE
            return None
        finally:
            self.is_streaming = False
            if self.error:
                self.streaming_content = ""

        assistant = self._local_message(
            conversation_id, MessageRole.ASSISTANT, self.streaming_content
        )
        self.messages.append(assistant)
        self.streaming_content = ""
        return assistant
