"""
Unit tests for SqliteUserRepository.
"""

from uuid import uuid4

import pytest

from streamchat.core.exceptions import NotFoundError
from streamchat.infrastructure.local.user_repository import SqliteUserRepository
from streamchat.models.user import UserCreate, UserProfileUpdate


@pytest.fixture
def user_repo(session_factory):
    return SqliteUserRepository(session_factory)


@pytest.mark.asyncio
async def test_create_and_lookup_by_provider(user_repo):
    created = await user_repo.create(
        UserCreate(
            provider_issuer="https://issuer.example.com",
            provider_sub="sub-1",
            email="user@example.com",
            display_name="User",
        )
    )

    found = await user_repo.get_by_provider("https://issuer.example.com", "sub-1")

    assert found.id == created.id
    assert (await user_repo.get(created.id)).email == "user@example.com"
    assert await user_repo.get_by_provider("https://other.example.com", "sub-1") is None


@pytest.mark.asyncio
async def test_update_profile_keeps_unset_fields(user_repo):
    created = await user_repo.create(
        UserCreate(
            provider_issuer="https://issuer.example.com",
            provider_sub="sub-1",
            email="user@example.com",
            display_name="User",
        )
    )

    updated = await user_repo.update_profile(
        created.id, UserProfileUpdate(avatar_url="https://avatars.example.com/1.png")
    )

    assert updated.avatar_url == "https://avatars.example.com/1.png"
    assert updated.display_name == "User"


@pytest.mark.asyncio
async def test_update_missing_user_raises(user_repo):
    with pytest.raises(NotFoundError):
        await user_repo.update_profile(uuid4(), UserProfileUpdate(display_name="x"))
