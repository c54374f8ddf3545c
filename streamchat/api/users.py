"""
User profile endpoints.
"""

from fastapi import APIRouter

from streamchat.api.deps import CurrentUser
from streamchat.interfaces.auth_provider import User

router = APIRouter()


@router.get("/me", response_model=User)
async def get_me(user: CurrentUser) -> User:
    """Return the signed-in user."""
    return user
