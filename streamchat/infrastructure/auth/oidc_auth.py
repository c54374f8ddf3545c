"""
OIDC/JWT authentication provider.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from jose import JWTError, jwt

from streamchat.core.config import Settings
from streamchat.core.exceptions import AuthenticationError, ConfigurationError
from streamchat.core.logger import logger
from streamchat.interfaces.auth_provider import IAuthProvider, User
from streamchat.interfaces.user_repository import IUserRepository
from streamchat.models.user import UserAccount, UserCreate, UserProfileUpdate


class OidcAuthProvider(IAuthProvider):
    """OIDC authentication provider with JWKS validation.

    A user account is created the first time an (issuer, subject) pair signs
    in. Later sign-ins refresh email, display name and avatar from the claims.
    """

    def __init__(
        self,
        settings: Settings,
        user_repo: IUserRepository,
        jwks_ttl_seconds: int = 3600,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._user_repo = user_repo
        self._jwks_ttl_seconds = jwks_ttl_seconds
        self._transport = transport
        self._jwks_cache: dict[str, Any] | None = None
        self._jwks_cache_expiry: float = 0.0
        if not self._settings.OIDC_ISSUER and not self._settings.OIDC_JWKS_URL:
            raise ConfigurationError("OIDC_ISSUER or OIDC_JWKS_URL must be set for OIDC auth")

    def _resolve_jwks_url(self) -> str:
        if self._settings.OIDC_JWKS_URL:
            return self._settings.OIDC_JWKS_URL
        issuer = self._settings.OIDC_ISSUER.rstrip("/")
        return f"{issuer}/.well-known/jwks.json"

    async def _get_jwks(self) -> dict[str, Any]:
        now = time.time()
        if self._jwks_cache and now < self._jwks_cache_expiry:
            return self._jwks_cache

        jwks_url = self._resolve_jwks_url()
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(jwks_url)
                response.raise_for_status()
                jwks = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch JWKS from {jwks_url}: {e}")
            raise AuthenticationError("Unable to verify token") from e

        self._jwks_cache = jwks
        self._jwks_cache_expiry = now + self._jwks_ttl_seconds
        return jwks

    async def _decode_token(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        jwks = await self._get_jwks()
        key = None
        for candidate in jwks.get("keys", []):
            if candidate.get("kid") == header.get("kid"):
                key = candidate
                break
        if not key:
            raise JWTError("Signing key not found")

        options = {
            "verify_aud": bool(self._settings.OIDC_AUDIENCE),
            "verify_iss": bool(self._settings.OIDC_ISSUER),
        }
        return jwt.decode(
            token,
            key,
            algorithms=[header.get("alg", "RS256")],
            audience=self._settings.OIDC_AUDIENCE or None,
            issuer=self._settings.OIDC_ISSUER or None,
            options=options,
        )

    async def verify_token(self, token: str) -> User:
        try:
            claims = await self._decode_token(token)
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        issuer = claims.get("iss") or self._settings.OIDC_ISSUER
        subject = claims.get("sub")
        if not issuer or not subject:
            raise AuthenticationError("Missing issuer or subject")

        email = claims.get(self._settings.OIDC_EMAIL_CLAIM or "email")
        display_name = claims.get(self._settings.OIDC_NAME_CLAIM or "name") or claims.get(
            "preferred_username"
        )
        avatar_url = claims.get(self._settings.OIDC_PICTURE_CLAIM or "picture")

        user = await self._user_repo.get_by_provider(issuer, subject)
        if not user:
            user = await self._user_repo.create(
                UserCreate(
                    provider_issuer=issuer,
                    provider_sub=subject,
                    email=email,
                    display_name=display_name,
                    avatar_url=avatar_url,
                )
            )
            logger.info(f"Created user {user.id} for {issuer}")
        elif (email, display_name, avatar_url) != (user.email, user.display_name, user.avatar_url):
            user = await self._user_repo.update_profile(
                user.id,
                UserProfileUpdate(email=email, display_name=display_name, avatar_url=avatar_url),
            )

        return self._to_user(user)

    def _to_user(self, user: UserAccount) -> User:
        return User(
            id=str(user.id),
            email=user.email,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )
