"""
Full-text search over a user's messages.

Content is stored encrypted, so matching happens in memory after decoding
a bounded window of the newest messages.
"""

from __future__ import annotations

from streamchat.core.encryption import MessageCipher
from streamchat.core.exceptions import ValidationError
from streamchat.interfaces.conversation_repository import IConversationRepository
from streamchat.models.conversation import MessageSearchResult

MIN_QUERY_LENGTH = 2
SCAN_LIMIT = 500
MAX_RESULTS = 50
SNIPPET_CONTEXT = 40
SNIPPET_FALLBACK_LENGTH = 100
UNTITLED = "Untitled"


def build_snippet(content: str, match_index: int, query_length: int) -> str:
    """Excerpt around a match, with ellipses where the content was cut."""
    if match_index < 0:
        suffix = "..." if len(content) > SNIPPET_FALLBACK_LENGTH else ""
        return content[:SNIPPET_FALLBACK_LENGTH] + suffix
    start = max(0, match_index - SNIPPET_CONTEXT)
    end = min(len(content), match_index + query_length + SNIPPET_CONTEXT)
    snippet = content[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(content):
        snippet = snippet + "..."
    return snippet


class MessageSearchService:
    """Case-insensitive substring search across a user's conversations."""

    def __init__(self, conversation_repo: IConversationRepository, cipher: MessageCipher):
        self._repo = conversation_repo
        self._cipher = cipher

    async def search(self, user_id: str, query: str | None) -> list[MessageSearchResult]:
        """
        Search the user's newest messages.

        Raises:
            ValidationError: query shorter than two characters after stripping
        """
        term = (query or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            raise ValidationError("Search query must be at least 2 characters")

        messages = await self._repo.list_recent_messages_for_user(user_id, limit=SCAN_LIMIT)
        if not messages:
            return []

        titles = await self._repo.get_titles(user_id, {m.conversation_id for m in messages})
        needle = term.lower()

        results: list[MessageSearchResult] = []
        for message in messages:
            content = self._cipher.decode(message.content)
            index = content.lower().find(needle)
            if index < 0:
                continue
            results.append(
                MessageSearchResult(
                    **message.model_dump(exclude={"content"}),
                    content=content,
                    conversation_title=titles.get(message.conversation_id) or UNTITLED,
                    snippet=build_snippet(content, index, len(term)),
                )
            )
            if len(results) >= MAX_RESULTS:
                break
        return results
