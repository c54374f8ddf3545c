"""
Integration tests for the HTTP API.

Runs the FastAPI app in-process with an in-memory database and a scripted
LLM provider.
"""

from uuid import UUID, uuid4

import pytest
from conftest import FakeLLMProvider
from httpx import ASGITransport, AsyncClient

from streamchat.api.deps import (
    get_cipher,
    get_conversation_repository,
    get_llm_provider,
    get_rate_limiter,
)
from streamchat.core.encryption import MessageCipher
from streamchat.core.exceptions import GenerationError, ModelRateLimitedError
from streamchat.infrastructure.local.rate_limiter import InMemoryRateLimiter
from streamchat.models.enums import MessageRole
from main import app

AUTH = {"Authorization": "Bearer dev_user"}


@pytest.fixture
def cipher():
    return MessageCipher("api-secret")


@pytest.fixture
def provider():
    return FakeLLMProvider(fragments=["Hello", " from", " the model"])


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(max_requests=20, window_seconds=60)


@pytest.fixture
def overrides(conversation_repo, provider, cipher, rate_limiter):
    app.dependency_overrides[get_conversation_repository] = lambda: conversation_repo
    app.dependency_overrides[get_llm_provider] = lambda: provider
    app.dependency_overrides[get_cipher] = lambda: cipher
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(overrides):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def lenient_client(overrides):
    """Client that returns the partial response instead of re-raising app errors."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


def _unwrap(exc: BaseException) -> BaseException:
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return exc


async def _create_conversation(client) -> str:
    response = await client.post("/api/conversations", headers=AUTH)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.post("/api/chat", json={"conversationId": str(uuid4()), "content": "hi"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_fields_return_400(self, client):
        response = await client.post("/api/chat", json={"content": "hi"}, headers=AUTH)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_conversation_returns_404(self, client):
        response = await client.post(
            "/api/chat",
            json={"conversationId": str(uuid4()), "content": "hi"},
            headers=AUTH,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_foreign_conversation_returns_404(self, client):
        conversation_id = await _create_conversation(client)
        response = await client.post(
            "/api/chat",
            json={"conversationId": conversation_id, "content": "hi"},
            headers={"Authorization": "Bearer someone_else"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_streams_plain_text_and_persists_turn(self, client, conversation_repo, cipher):
        conversation_id = await _create_conversation(client)

        async with client.stream(
            "POST",
            "/api/chat",
            json={"conversationId": conversation_id, "content": "Hello"},
            headers=AUTH,
        ) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/plain")
            body = "".join([chunk async for chunk in response.aiter_text()])

        assert body == "Hello from the model"

        detail = (await client.get(f"/api/conversations/{conversation_id}", headers=AUTH)).json()
        assert detail["title"] == "Hello"
        assert [(m["role"], m["content"]) for m in detail["messages"]] == [
            ("user", "Hello"),
            ("assistant", "Hello from the model"),
        ]

    @pytest.mark.asyncio
    async def test_snake_case_body_and_model_override(self, client, provider):
        conversation_id = await _create_conversation(client)

        response = await client.post(
            "/api/chat",
            json={
                "conversation_id": conversation_id,
                "content": "Hi",
                "model": "meta-llama/llama-3.2-3b-instruct:free",
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        assert provider.models_requested == ["meta-llama/llama-3.2-3b-instruct:free"]

    @pytest.mark.asyncio
    async def test_upstream_rate_limit_before_first_chunk_aborts_stream(
        self, client, provider, conversation_repo
    ):
        provider.error = GenerationError("OpenRouter API error: 429 - slow down", status_code=429)
        conversation_id = await _create_conversation(client)

        with pytest.raises(Exception) as exc_info:
            async with client.stream(
                "POST",
                "/api/chat",
                json={"conversationId": conversation_id, "content": "Hello"},
                headers=AUTH,
            ) as response:
                await response.aread()

        assert isinstance(_unwrap(exc_info.value), ModelRateLimitedError)
        messages = await conversation_repo.list_messages(UUID(conversation_id))
        assert [m.role for m in messages] == [MessageRole.USER]

    @pytest.mark.asyncio
    async def test_upstream_failure_before_first_chunk_keeps_200_status(
        self, lenient_client, provider, conversation_repo
    ):
        provider.error = GenerationError("OpenRouter API error: 500 - boom", status_code=500)
        conversation_id = await _create_conversation(lenient_client)

        response = await lenient_client.post(
            "/api/chat",
            json={"conversationId": conversation_id, "content": "Hello"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.text == ""
        messages = await conversation_repo.list_messages(UUID(conversation_id))
        assert [m.role for m in messages] == [MessageRole.USER]

    @pytest.mark.asyncio
    async def test_rate_limit_mid_stream_aborts_without_assistant_message(
        self, client, provider, conversation_repo
    ):
        provider.error = GenerationError("OpenRouter API error: 429 - slow down", status_code=429)
        provider.fail_after = 1
        conversation_id = await _create_conversation(client)

        with pytest.raises(Exception) as exc_info:
            async with client.stream(
                "POST",
                "/api/chat",
                json={"conversationId": conversation_id, "content": "Hello"},
                headers=AUTH,
            ) as response:
                await response.aread()

        assert isinstance(_unwrap(exc_info.value), ModelRateLimitedError)
        messages = await conversation_repo.list_messages(UUID(conversation_id))
        assert [m.role for m in messages] == [MessageRole.USER]

    @pytest.mark.asyncio
    async def test_mid_stream_failure_delivers_partial_body(self, lenient_client, provider):
        provider.error = GenerationError("connection reset", category="network")
        provider.fail_after = 1
        conversation_id = await _create_conversation(lenient_client)

        response = await lenient_client.post(
            "/api/chat",
            json={"conversationId": conversation_id, "content": "Hello"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.text == "Hello"

    @pytest.mark.asyncio
    async def test_per_user_rate_limit_returns_429_with_retry_after(self, client):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60)
        app.dependency_overrides[get_rate_limiter] = lambda: limiter
        conversation_id = await _create_conversation(client)
        payload = {"conversationId": conversation_id, "content": "Hello"}

        first = await client.post("/api/chat", json=payload, headers=AUTH)
        second = await client.post("/api/chat", json=payload, headers=AUTH)

        assert first.status_code == 200
        assert second.status_code == 429
        assert int(second.headers["Retry-After"]) > 0

    @pytest.mark.asyncio
    async def test_invalid_requests_do_not_spend_rate_limit(self, client):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60)
        app.dependency_overrides[get_rate_limiter] = lambda: limiter
        conversation_id = await _create_conversation(client)

        missing = await client.post("/api/chat", json={"content": "Hello"}, headers=AUTH)
        unknown = await client.post(
            "/api/chat", json={"conversationId": str(uuid4()), "content": "Hello"}, headers=AUTH
        )
        valid = await client.post(
            "/api/chat", json={"conversationId": conversation_id, "content": "Hello"}, headers=AUTH
        )

        assert (missing.status_code, unknown.status_code, valid.status_code) == (400, 404, 200)



class TestConversationEndpoints:
    """Tests for /api/conversations."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, client):
        conversation_id = await _create_conversation(client)

        response = await client.get("/api/conversations", headers=AUTH)

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [conversation_id]
        assert response.json()[0]["title"] == "New Chat"

    @pytest.mark.asyncio
    async def test_rename(self, client):
        conversation_id = await _create_conversation(client)

        response = await client.patch(
            f"/api/conversations/{conversation_id}", json={"title": "Renamed"}, headers=AUTH
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_delete_then_fetch_returns_404(self, client):
        conversation_id = await _create_conversation(client)
        await client.post(
            "/api/chat", json={"conversationId": conversation_id, "content": "Hello"}, headers=AUTH
        )

        deleted = await client.delete(f"/api/conversations/{conversation_id}", headers=AUTH)
        fetched = await client.get(f"/api/conversations/{conversation_id}", headers=AUTH)

        assert deleted.status_code == 204
        assert fetched.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_cannot_read(self, client):
        conversation_id = await _create_conversation(client)
        response = await client.get(
            f"/api/conversations/{conversation_id}", headers={"Authorization": "Bearer someone_else"}
        )
        assert response.status_code == 404


class TestMessageEndpoints:
    """Tests for /api/messages."""

    @pytest.mark.asyncio
    async def test_search_requires_two_characters(self, client):
        response = await client.get("/api/messages/search", params={"q": "a"}, headers=AUTH)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search_finds_decoded_messages(self, client):
        conversation_id = await _create_conversation(client)
        await client.post(
            "/api/chat", json={"conversationId": conversation_id, "content": "Tell me about otters"},
            headers=AUTH,
        )

        response = await client.get("/api/messages/search", params={"q": "OTTERS"}, headers=AUTH)

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["content"] for r in results] == ["Tell me about otters"]
        assert results[0]["conversation_title"] == "Tell me about otters"

    @pytest.mark.asyncio
    async def test_delete_message(self, client, conversation_repo):
        conversation_id = await _create_conversation(client)
        message = await conversation_repo.add_message(UUID(conversation_id), MessageRole.USER, "hi")

        foreign = await client.delete(
            f"/api/messages/{message.id}", headers={"Authorization": "Bearer someone_else"}
        )
        own = await client.delete(f"/api/messages/{message.id}", headers=AUTH)
        again = await client.delete(f"/api/messages/{message.id}", headers=AUTH)

        assert foreign.status_code == 404
        assert own.status_code == 204
        assert again.status_code == 404


class TestMiscEndpoints:
    """Tests for models, users and health endpoints."""

    @pytest.mark.asyncio
    async def test_models(self, client):
        response = await client.get("/api/models", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["provider"] == "fake"
        assert data["default_model_id"] == "fake-model"
        assert "mistralai/mistral-7b-instruct:free" in [m["id"] for m in data["models"]]

    @pytest.mark.asyncio
    async def test_me(self, client):
        response = await client.get("/api/users/me", headers=AUTH)
        assert response.status_code == 200
        assert response.json()["id"] == "dev_user"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
