"""
Shared pytest fixtures and configuration.

End-to-end tests run the real app against an in-memory SQLite database; the
LLM provider and the identity verifier are replaced by fakes through
``app.dependency_overrides``.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("LOG_FILE", "")

import uuid
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from recap.main import app
from recap.api.dependencies import get_identity_verifier, get_summary_llm_provider
from recap.core.db import Base, build_sessionmaker, enable_sqlite_foreign_keys, get_db_session
from recap.core.limiter import limiter
from recap.core.providers.identity_provider import IdentityClaims, IdentityVerifier
from recap.core.providers.llm_provider import LLMMessage, LLMProvider, LLMResponse
from recap.models.sql import SummaryModel, User

limiter.enabled = False

LLM_ANSWER = """KEY POINTS:
- X is introduced from first principles
- The basic vocabulary of X is defined
- Common mistakes when starting with X are shown
- A small worked example ties it together

SUMMARY:
The video introduces X for complete beginners. It defines the core terms,
walks through the most common early mistakes and closes with a worked example."""


class FakeLLMProvider(LLMProvider):
    """Records prompts and answers with a canned response (or raises)."""

    def __init__(self, content: str = LLM_ANSWER, error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[List[LLMMessage]] = []

    async def generate_text(self, messages, temperature=0.7, max_tokens=None) -> LLMResponse:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model="fake-model")


class FakeIdentityVerifier(IdentityVerifier):
    """Accepts exactly the tokens registered in ``identities``."""

    def __init__(self, identities: Dict[str, IdentityClaims]):
        self.identities = identities

    async def verify(self, token: str) -> Optional[IdentityClaims]:
        return self.identities.get(token)


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def llm_provider():
    return FakeLLMProvider()


@pytest.fixture
def identities() -> Dict[str, IdentityClaims]:
    """Bearer token -> claims accepted by the fake verifier."""
    return {}


@pytest.fixture
def override_dependencies(session_factory, llm_provider, identities):
    """Point the app at the test database and the fake collaborators."""
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    def override_get_summary_llm_provider():
        return llm_provider

    def override_get_identity_verifier():
        return FakeIdentityVerifier(identities)

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_summary_llm_provider] = override_get_summary_llm_provider
    app.dependency_overrides[get_identity_verifier] = override_get_identity_verifier

    yield

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_dependencies):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(session_factory, identities):
    """
    Create a user row with a given balance and register a token for it.

    Returns (user_id, headers) where headers carry the bearer token.
    """
    async def _make_user(credits: int = 3, name: str = "Test User", email: Optional[str] = None):
        user_id = uuid.uuid4()
        email = email or f"user-{user_id.hex[:8]}@example.com"
        async with session_factory() as session:
            session.add(User(id=user_id, email=email, name=name, provider="google", credits=credits))
            await session.commit()

        token = f"token-{user_id.hex}"
        identities[token] = IdentityClaims(id=user_id, email=email, name=name, provider="google")
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def get_credits(session_factory):
    async def _get_credits(user_id: uuid.UUID) -> Optional[int]:
        async with session_factory() as session:
            result = await session.execute(select(User.credits).where(User.id == user_id))
            return result.scalar_one_or_none()

    return _get_credits


@pytest.fixture
def count_summaries(session_factory):
    async def _count_summaries() -> int:
        async with session_factory() as session:
            result = await session.execute(select(SummaryModel))
            return len(result.scalars().all())

    return _count_summaries
