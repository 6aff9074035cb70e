from dataclasses import dataclass, field
from typing import AsyncGenerator, Callable, Dict, List, Optional, Union
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.pool import StaticPool

from transparent_trust.core.database.utils import create_all
from transparent_trust.core.llm import LLMService
from transparent_trust.core.rate_limit import rate_limiter

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@dataclass
class FakeLLM:
    """Scripted model: ``reply`` is a fixed string or a function of the user prompt."""

    reply: Union[str, Callable[[str], str]] = "{}"
    prompts: List[str] = field(default_factory=list)
    system_prompts: List[str] = field(default_factory=list)

    def respond(self, messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        user_prompt = ""
        for message in messages:
            for part in message.parts:
                if part.part_kind == "user-prompt":
                    user_prompt = str(part.content)
                elif part.part_kind == "system-prompt":
                    self.system_prompts.append(part.content)
        self.prompts.append(user_prompt)
        text = self.reply(user_prompt) if callable(self.reply) else self.reply
        return ModelResponse(parts=[TextPart(text)])

    @property
    def model(self) -> FunctionModel:
        return FunctionModel(self.respond)


@dataclass
class FakeFetcher:
    """Stands in for the URL downloader; unknown URLs fail like an unreachable host."""

    pages: Dict[str, str] = field(default_factory=dict)
    calls: List[str] = field(default_factory=list)

    async def __call__(self, url: str, **kwargs) -> Optional[str]:
        self.calls.append(url)
        return self.pages.get(url)


def make_headers(
    user_id: str = "u-admin",
    role: str = "ADMIN",
    email: Optional[str] = None,
    name: Optional[str] = None,
    groups: Optional[List[str]] = None,
) -> Dict[str, str]:
    headers = {
        "x-user-id": user_id,
        "x-user-role": role,
        "x-user-email": email or f"{user_id}@example.com",
        "x-user-name": name or user_id,
    }
    if groups:
        headers["x-user-groups"] = ",".join(groups)
    return headers


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return make_headers()


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return make_headers(user_id="u-user", role="USER")


@pytest.fixture
def headers_for() -> Callable[..., Dict[str, str]]:
    """Factory for arbitrary callers, e.g. ``headers_for("u-2", role="USER", groups=[...])``."""
    return make_headers


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session_maker() as session:  # type: ignore[attr-defined]
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession, fake_llm: FakeLLM, fake_fetcher: FakeFetcher
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with mocked lifespan, test database, scripted LLM and fetcher."""
    from transparent_trust.core.database import get_session
    from transparent_trust.server.main import app
    from transparent_trust.server.services.deps import get_llm_service, get_url_fetcher

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    def get_llm_service_override() -> LLMService:
        return LLMService(session=session, model=fake_llm.model)

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_llm_service] = get_llm_service_override
    app.dependency_overrides[get_url_fetcher] = lambda: fake_fetcher
    rate_limiter.reset()

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("transparent_trust.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
    rate_limiter.reset()
