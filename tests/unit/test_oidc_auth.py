"""
Unit tests for OidcAuthProvider user provisioning.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import httpx
import pytest
from jose import JWTError

from streamchat.core.config import Settings
from streamchat.core.exceptions import AuthenticationError, ConfigurationError
from streamchat.infrastructure.auth.oidc_auth import OidcAuthProvider
from streamchat.interfaces.user_repository import IUserRepository
from streamchat.models.user import UserAccount

ISSUER = "https://issuer.example.com"


def _settings(**overrides):
    values = {"OIDC_ISSUER": ISSUER, "OIDC_AUDIENCE": "streamchat"}
    values.update(overrides)
    return Settings(**values)


def _account(**overrides):
    now = datetime.now(timezone.utc)
    values = {
        "id": uuid4(),
        "provider_issuer": ISSUER,
        "provider_sub": "gh|42",
        "email": "octo@example.com",
        "display_name": "Octo Cat",
        "avatar_url": "https://avatars.example.com/42.png",
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return UserAccount(**values)


CLAIMS = {
    "iss": ISSUER,
    "sub": "gh|42",
    "email": "octo@example.com",
    "name": "Octo Cat",
    "picture": "https://avatars.example.com/42.png",
}


@pytest.fixture
def user_repo():
    return AsyncMock(spec=IUserRepository)


def _provider(user_repo, claims=CLAIMS):
    provider = OidcAuthProvider(_settings(), user_repo)
    provider._decode_token = AsyncMock(return_value=dict(claims))
    return provider


def test_requires_issuer_or_jwks_url(user_repo):
    with pytest.raises(ConfigurationError):
        OidcAuthProvider(Settings(OIDC_ISSUER="", OIDC_JWKS_URL=""), user_repo)


@pytest.mark.asyncio
async def test_first_sign_in_creates_user(user_repo):
    account = _account()
    user_repo.get_by_provider.return_value = None
    user_repo.create.return_value = account

    user = await _provider(user_repo).verify_token("token")

    created = user_repo.create.await_args.args[0]
    assert created.provider_issuer == ISSUER
    assert created.provider_sub == "gh|42"
    assert created.avatar_url == "https://avatars.example.com/42.png"
    assert user.id == str(account.id)
    assert user.display_name == "Octo Cat"


@pytest.mark.asyncio
async def test_returning_user_with_unchanged_profile_is_not_updated(user_repo):
    user_repo.get_by_provider.return_value = _account()

    await _provider(user_repo).verify_token("token")

    user_repo.create.assert_not_awaited()
    user_repo.update_profile.assert_not_awaited()


@pytest.mark.asyncio
async def test_returning_user_profile_is_refreshed(user_repo):
    account = _account(display_name="Old Name")
    user_repo.get_by_provider.return_value = account
    user_repo.update_profile.return_value = _account(id=account.id)

    user = await _provider(user_repo).verify_token("token")

    update = user_repo.update_profile.await_args.args[1]
    assert update.display_name == "Octo Cat"
    assert user.display_name == "Octo Cat"


@pytest.mark.asyncio
async def test_invalid_token_raises_authentication_error(user_repo):
    provider = OidcAuthProvider(_settings(), user_repo)
    provider._decode_token = AsyncMock(side_effect=JWTError("Signature verification failed"))

    with pytest.raises(AuthenticationError):
        await provider.verify_token("token")


@pytest.mark.asyncio
async def test_missing_subject_raises_authentication_error(user_repo):
    claims = {k: v for k, v in CLAIMS.items() if k != "sub"}
    with pytest.raises(AuthenticationError):
        await _provider(user_repo, claims).verify_token("token")


@pytest.mark.asyncio
async def test_jwks_fetch_failure_raises_authentication_error(user_repo):
    def handler(request):
        return httpx.Response(500)

    provider = OidcAuthProvider(_settings(), user_repo, transport=httpx.MockTransport(handler))

    with pytest.raises(AuthenticationError):
        await provider._get_jwks()
