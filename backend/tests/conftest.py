"""Shared fixtures: per-test SQLite database, ASGI client, tokens, fake judge."""
import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="resource-arena-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/import.db"
os.environ["AUTH_JWT_SECRET"] = "test-secret-for-session-tokens-0123456789"
os.environ["AUTH_JWKS_URL"] = ""
os.environ["SEED_DEFAULTS"] = "false"
for _key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY", "DEEPSEEK_API_KEY", "GROK_API_KEY"):
    os.environ[_key] = ""

import json

import httpx
import jwt
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from resource_arena.database import get_db
from resource_arena.main import app
from resource_arena.models import AiModel, AppConfig, Base, Match, Prompt, SubmittedResource
from resource_arena.services import llm

TEST_SECRET = os.environ["AUTH_JWT_SECRET"]


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/arena.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_token(sub: str, username: str | None = None) -> str:
    claims = {"sub": sub}
    if username:
        claims["username"] = username
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


def auth_header(sub: str, username: str | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, username)}"}


@pytest.fixture
async def game(db):
    """Two models, default + prompt ladder (levels 1..3)."""
    default_model = AiModel(provider="openai", name="gpt-test")
    winner_model = AiModel(provider="anthropic", name="claude-test")
    prompts = [
        Prompt(title="Level two", description="Second challenge", level=2),
        Prompt(title="Level one", description="First challenge", level=1),
        Prompt(title="Level three", description="Third challenge", level=3),
    ]
    db.add_all([default_model, winner_model, *prompts])
    await db.flush()
    db.add(AppConfig(key="default_ai_model", value=str(default_model.id)))
    await db.commit()
    by_level = {p.level: p for p in prompts}
    return {
        "default_model": default_model,
        "winner_model": winner_model,
        "prompts": by_level,
    }


async def create_match(db, prompt_id, urls, user_id=None, score_ai=None):
    match = Match(
        user_id=user_id,
        prompt_id=prompt_id,
        is_anonymous=user_id is None,
        score_ai=score_ai,
        resources=[SubmittedResource(url=u) for u in urls],
    )
    db.add(match)
    await db.commit()
    return match


class FakeJudge:
    """Stands in for the model gateway; records every call."""

    def __init__(self):
        self.response = "{}"
        self.calls = []

    def respond_with(self, payload):
        self.response = payload if isinstance(payload, str) else json.dumps(payload)

    async def __call__(self, model, prompt):
        self.calls.append({"provider": model.provider, "name": model.name, "prompt": prompt})
        return self.response


@pytest.fixture
def judge(monkeypatch):
    fake = FakeJudge()
    monkeypatch.setattr(llm, "generate_with_model", fake)
    return fake
