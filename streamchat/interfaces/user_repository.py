"""
User repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from streamchat.models.user import UserAccount, UserCreate, UserProfileUpdate


class IUserRepository(ABC):
    """Abstract interface for user persistence."""

    @abstractmethod
    async def get(self, user_id: UUID) -> Optional[UserAccount]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_provider(self, issuer: str, sub: str) -> Optional[UserAccount]:
        """Get a user by identity-provider issuer + subject."""
        pass

    @abstractmethod
    async def create(self, data: UserCreate) -> UserAccount:
        """Create a new user."""
        pass

    @abstractmethod
    async def update_profile(self, user_id: UUID, update: UserProfileUpdate) -> UserAccount:
        """Refresh profile fields from the identity provider."""
        pass
