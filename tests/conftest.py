"""
Shared pytest fixtures.

- an in-memory SQLite engine (aiosqlite, one shared connection) per test
- an app built around that engine and an httpx client talking to it
- an ``api`` helper for the repetitive register/create calls
"""

import os

# Must be set before mediatrack.config is imported
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-0123456789"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from mediatrack.database import build_engine, build_session_factory, init_models
from mediatrack.main import create_app

API = "/api/v1"


@pytest.fixture
async def engine():
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(engine):
    app = create_app(engine, init_db=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class ApiHelper:
    """Thin wrappers around the endpoints most tests need as setup."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def register(self, nick: str, email: Optional[str] = None, password: str = "secret123") -> dict:
        res = await self.client.post(
            f"{API}/auth/register",
            json={
                "email": email or f"{nick.lower()}@example.com",
                "firstName": "Test",
                "lastName": "User",
                "nickName": nick,
                "password": password,
            },
        )
        assert res.status_code == 201, res.text
        return res.json()

    async def token(self, nick: str) -> str:
        return (await self.register(nick))["token"]

    async def create_media(self, token: str, title: str, **overrides) -> dict:
        body = {
            "title": title,
            "type": "MOVIE",
            "category": ["Drama"],
            "releaseYear": 2010,
        }
        body.update(overrides)
        res = await self.client.post(f"{API}/media", json=body, headers=auth(token))
        assert res.status_code == 201, res.text
        return res.json()

    async def add_to_library(self, token: str, media_id: int, **fields) -> dict:
        res = await self.client.post(
            f"{API}/library/{media_id}", json=fields or None, headers=auth(token)
        )
        assert res.status_code == 201, res.text
        return res.json()

    async def comment(self, token: str, media_id: int, content: str = "Great watch") -> dict:
        res = await self.client.post(
            f"{API}/media/{media_id}/comments", json={"content": content}, headers=auth(token)
        )
        assert res.status_code == 201, res.text
        return res.json()


@pytest.fixture
def api(client) -> ApiHelper:
    return ApiHelper(client)
