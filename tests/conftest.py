"""
Test fixtures for the chat API tests.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test database before importing app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from ollama_chat.api.deps import (  # noqa: E402
    get_completion_client,
    get_conversation_locks,
    get_settings,
    get_system_prompt,
)
from ollama_chat.chat.locks import ConversationLocks  # noqa: E402
from ollama_chat.chat.prompt import PromptRequest  # noqa: E402
from ollama_chat.config import Settings  # noqa: E402
from ollama_chat.db import Base, enable_sqlite_foreign_keys, get_session  # noqa: E402
from ollama_chat.errors import CompletionError  # noqa: E402
from ollama_chat.main import app  # noqa: E402

SYSTEM_PROMPT = "You are a test assistant."


class FakeCompletionClient:
    """Stands in for Ollama. Naming requests carry a single message."""

    model = "test-model"

    def __init__(
        self,
        name: str = "  Greeting Chat \n",
        answer: str = "Hello! How can I help?",
        fail_naming: bool = False,
        fail_chat: bool = False,
    ):
        self.name = name
        self.answer = answer
        self.fail_naming = fail_naming
        self.fail_chat = fail_chat
        self.requests: list[PromptRequest] = []

    @property
    def chat_requests(self) -> list[PromptRequest]:
        return [r for r in self.requests if len(r.messages) > 1]

    @property
    def naming_requests(self) -> list[PromptRequest]:
        return [r for r in self.requests if len(r.messages) == 1]

    async def complete(self, request: PromptRequest) -> str:
        self.requests.append(request)
        if len(request.messages) == 1:
            if self.fail_naming:
                raise CompletionError("connection refused")
            return self.name
        if self.fail_chat:
            raise CompletionError("timed out")
        return self.answer


@pytest.fixture
async def engine():
    """In-memory SQLite engine with tables created, one per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Direct database session for test setup/assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def completion_client():
    return FakeCompletionClient()


@pytest.fixture
def settings():
    return Settings(ollama_base_url="http://ollama.test", ollama_model="test-model")


@pytest.fixture
async def client(session_factory, completion_client, settings):
    """Async HTTP client for testing FastAPI app."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    locks = ConversationLocks()
    app.dependency_overrides[get_session] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: completion_client
    app.dependency_overrides[get_system_prompt] = lambda: SYSTEM_PROMPT
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_conversation_locks] = lambda: locks

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
