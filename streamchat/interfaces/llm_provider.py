"""
LLM provider interface.

Defines the contract for text-generation backends.
Implementations: OpenRouter, generic OpenAI-compatible endpoints.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Sequence

from streamchat.models.chat import PromptMessage


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    name: str = "llm"

    @abstractmethod
    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        """
        Send a chat request and return the complete response text.

        Raises:
            GenerationError: On non-success status or connection failure
        """
        pass

    @abstractmethod
    def stream_complete(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        """
        Send a chat request and stream the response.

        Returns an async iterator of text fragments in arrival order. It ends
        by exhaustion and cannot be restarted; a new call issues a new
        upstream request. Closing the iterator releases the connection.

        Raises:
            GenerationError: On non-success status before the first fragment,
                or on connection failure at any point
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the model identifier used for requests.

        Returns:
            Model name string for logging/display
        """
        pass

    @abstractmethod
    def get_available_models(self) -> list[str]:
        """
        Get list of available model identifiers for selection.

        Returns:
            List of model identifier strings
        """
        pass

    def with_model(self, model_id: str) -> "ILLMProvider":
        """
        Create a new provider instance using a different model.

        Returns a new ILLMProvider configured for the given model_id.
        Default implementation returns self (no override).
        """
        return self
