"""API routers."""

from streamchat.api import (
    chat,
    conversations,
    messages,
    models,
    users,
)

__all__ = [
    "chat",
    "conversations",
    "messages",
    "models",
    "users",
]
