"""
Shared fixtures: in-memory SQLite in place of PostgreSQL, an AsyncMock
standing in for the Redis revocation list, and helpers for seeding users and
minting sessions.
"""

import os

os.environ.setdefault("ORGROLES_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ORGROLES_LOG_FORMAT", "text")
os.environ.setdefault("ORGROLES_DEBUG", "false")

import uuid
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import create_session_token, hash_password
from app.core.database import get_session
from app.main import app as fastapi_app
from app.models.organization import Organization
from app.models.user import User


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis():
    """AsyncMock Redis whose revocation calls read and write a plain dict."""
    store: dict[str, str] = {}

    async def _setex(key, ttl, value):
        store[key] = value

    async def _exists(key):
        return 1 if key in store else 0

    redis = AsyncMock()
    redis.setex.side_effect = _setex
    redis.exists.side_effect = _exists
    redis.store = store
    with patch("app.core.auth.get_redis", return_value=redis):
        yield redis


@pytest.fixture
async def client(session_factory, fake_redis):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    try:
        async with AsyncClient(
            transport=ASGITransport(app=fastapi_app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make(
        role: str = "user",
        organization_id: Optional[uuid.UUID] = None,
        *,
        user_id: Optional[str] = None,
        legacy_id: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        uid = user_id or str(uuid.uuid4())
        user = User(
            id=uid,
            legacy_id=legacy_id,
            email=email or f"{uid[:8]}@example.com",
            name=name or f"User {uid[:8]}",
            role=role,
            organization_id=organization_id,
            password_hash=hash_password(password) if password else None,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make


@pytest.fixture
def make_org(session_factory):
    async def _make(name: str = "Acme", *, is_active: bool = True) -> Organization:
        org = Organization(name=name, description=f"{name} description", is_active=is_active)
        async with session_factory() as session:
            session.add(org)
            await session.commit()
        return org

    return _make


def bearer(user: User) -> dict:
    """Authorization header for a session issued from the user's current record."""
    token, _, _ = create_session_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(make_user):
    return await make_user("admin", name="Admin")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)
