"""
TripFolders Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite database, users,
       authenticated HTTP client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:        SQLite file in tmp_path with every table created
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── db_session:       One AsyncSession for service-level tests
    ├── make_user:        Factory inserting committed users
    ├── alice/bob/carol:  Shared accounts; private_pat: a private account
    ├── mock_db_session:  AsyncMock session for pure unit tests
    └── client_for:       HTTPX AsyncClient signed in as a given user
"""

import os
import tempfile

# Override settings for testing BEFORE any tripfolders imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="tripfolders_test_"), "app.db"
)
os.environ["SECRET_KEY"] = "test-secret-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import base64
import json
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tripfolders.config import settings
from tripfolders.database import Base, get_db_session
from tripfolders.models import User
from tripfolders.services.user_directory import create_access_token


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database per test, schema created from the models."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = folder
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# User Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(session_factory):
    """Factory: `await make_user("alice", is_private=False)` → committed User."""

    async def _make(username: str, is_private: bool = False) -> User:
        async with session_factory() as session:
            user = User(username=username, is_private=is_private)
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("bob")


@pytest_asyncio.fixture
async def carol(make_user):
    return await make_user("carol")


@pytest_asyncio.fixture
async def private_pat(make_user):
    return await make_user("pat", is_private=True)


# ══════════════════════════════════════════════════════════════════════════
# Payload Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def encoded_image(sample_image_bytes):
    """The upload widget's JSON payload for sample_image_bytes."""
    return json.dumps(
        {"type": "image/jpeg", "data": base64.b64encode(sample_image_bytes).decode("ascii")}
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client_for(session_factory):
    """
    Factory for HTTPX AsyncClients talking to the app.

    Every request gets its own session on the test database, committed the
    same way get_db_session commits. Pass a user to sign the client in.

    Usage:
        client = await client_for(alice)
        response = await client.get("/tripFolders/private")
    """
    from tripfolders.main import app

    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session_override
    clients = []

    async def _make(user=None) -> AsyncClient:
        cookies = {}
        if user is not None:
            cookies[settings.token_cookie_name] = create_access_token(user.id)
        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()
