"""
Shared fixtures.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH_PROVIDER", "mock")

from typing import AsyncIterator, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from streamchat.core.exceptions import GenerationError
from streamchat.infrastructure.local.conversation_repository import SqliteConversationRepository
from streamchat.infrastructure.local.database import Base
from streamchat.interfaces.llm_provider import ILLMProvider
from streamchat.models.chat import PromptMessage


class FakeLLMProvider(ILLMProvider):
    """Scripted provider: yields fragments, optionally failing after some of them."""

    name = "fake"

    def __init__(
        self,
        fragments: Sequence[str] = ("Hello", " there"),
        error: Optional[GenerationError] = None,
        fail_after: int = 0,
        model_name: str = "fake-model",
    ):
        self.fragments = list(fragments)
        self.error = error
        self.fail_after = fail_after
        self.model_name = model_name
        self.calls: list[list[PromptMessage]] = []
        self.models_requested: list[str] = []
        self.closed = False
        self.on_open = None

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.calls.append(list(messages))
        return "".join(self.fragments)

    async def stream_complete(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        self.calls.append(list(messages))
        if self.on_open:
            await self.on_open()
        try:
            for index, fragment in enumerate(self.fragments):
                if self.error and index == self.fail_after:
                    raise self.error
                yield fragment
            if self.error and self.fail_after >= len(self.fragments):
                raise self.error
        finally:
            self.closed = True

    def get_model_name(self) -> str:
        return self.model_name

    def get_available_models(self) -> list[str]:
        return [self.model_name]

    def with_model(self, model_id: str) -> "FakeLLMProvider":
        self.models_requested.append(model_id)
        return self


@pytest.fixture
async def session_factory():
    """In-memory SQLite session factory with tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def conversation_repo(session_factory):
    return SqliteConversationRepository(session_factory)


@pytest.fixture
def fake_provider():
    return FakeLLMProvider()


@pytest.fixture
def test_user_id():
    return "test_user"
