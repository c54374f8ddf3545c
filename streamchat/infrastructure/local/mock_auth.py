"""
Mock authentication provider for local development and tests.
"""

from streamchat.core.exceptions import AuthenticationError
from streamchat.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """Treats the bearer token itself as the user ID."""

    async def verify_token(self, token: str) -> User:
        user_id = token.strip()
        if not user_id:
            raise AuthenticationError("Empty bearer token")
        # Email-shaped ids double as the address
        email = user_id if "@" in user_id else None
        return User(id=user_id, email=email, display_name=user_id)
