"""
Shared fixtures for the session API tests.

Run with: pytest -v
"""

import os
import time
from typing import Dict, Optional, Tuple

# Settings are read at import time; pin them before the app is imported
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("TRUSTED_PROXIES", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.cookies import CookieTransport, get_cookie_transport
from app.core.rate_limiter import rate_limiter
from app.core.security import SigningKeys, TokenSigner, get_token_signer
from app.db.redis import get_redis
from app.db.session import Base, get_db
from app.models.user import UserRole
from app.services.session_store import SessionStore
from app.services.user_directory import UserDirectory
from main import app

REFRESH_TTL = 7 * 24 * 60 * 60


class InMemoryRedis:
    """The subset of the redis.asyncio client the session store uses."""

    def __init__(self):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self.down = False

    def _check(self) -> None:
        if self.down:
            raise RedisConnectionError("Connection refused")

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires = entry
        if expires is not None and expires <= time.time():
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self._check()
        self._data[key] = (value, time.time() + ex if ex else None)
        return True

    async def get(self, key: str) -> Optional[str]:
        self._check()
        return self._live(key)

    async def delete(self, *keys: str) -> int:
        self._check()
        return sum(1 for key in keys if self._data.pop(key, None) is not None)

    async def ttl(self, key: str) -> int:
        self._check()
        if self._live(key) is None:
            return -2
        expires = self._data[key][1]
        return -1 if expires is None else int(expires - time.time())

    async def ping(self) -> bool:
        self._check()
        return True


# ============================================
# Infrastructure
# ============================================

@pytest.fixture
def signer():
    return TokenSigner(SigningKeys(access_secret="test-access-secret", refresh_secret="test-refresh-secret"))


@pytest.fixture
def cookie_transport():
    return CookieTransport(access_max_age=15 * 60, refresh_max_age=REFRESH_TTL, secure=False)


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def store(fake_redis):
    return SessionStore(fake_redis, REFRESH_TTL)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ============================================
# HTTP client against the real app
# ============================================

@pytest.fixture
def configured_app(session_factory, fake_redis, signer, cookie_transport):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_token_signer] = lambda: signer
    app.dependency_overrides[get_cookie_transport] = lambda: cookie_transport
    rate_limiter.clear()
    yield app
    app.dependency_overrides.clear()
    rate_limiter.clear()


@pytest.fixture
def make_client(configured_app):
    """Factory for independent clients, i.e. separate browsers / devices."""
    def _make() -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=configured_app), base_url="http://testserver")
    return _make


@pytest_asyncio.fixture
async def client(make_client):
    async with make_client() as ac:
        yield ac


@pytest.fixture
def make_admin(session_factory):
    async def _promote(email: str) -> None:
        async with session_factory() as session:
            user = await UserDirectory.get_by_email(session, email)
            await UserDirectory.set_role(session, user.id, UserRole.ADMIN)
            await session.commit()
    return _promote


async def signup(client: AsyncClient, email: str = "a@x.com", password: str = "p1-secret", name: str = "Ada"):
    return await client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})


async def login(client: AsyncClient, email: str = "a@x.com", password: str = "p1-secret"):
    return await client.post("/api/auth/login", json={"email": email, "password": password})
