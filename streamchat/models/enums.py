"""
Enum definitions for the application.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Role of a message author within a conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
