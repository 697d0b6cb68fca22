"""
Notify Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with the
       full schema; service tests use a session on it directly and API tests
       reach it through the app with get_db_session overridden.

Fixture Hierarchy (all function-scoped):
    ├── db_engine: in-memory engine with all tables created
    ├── session_factory / db_session: sessions on that engine
    ├── alice / bob / carol: committed users
    ├── auth_headers: builds an Authorization header for a user
    ├── sample_png_bytes: tiny PNG for upload tests
    └── test_client: HTTPX AsyncClient bound to the app
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-pytest-only"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from typing import AsyncGenerator, Callable, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db_session  # noqa: E402
from app.models.friend_request import FriendRequest  # noqa: E402,F401
from app.models.post import Comment, Post  # noqa: E402,F401
from app.models.user import User  # noqa: E402
from app.security import create_access_token  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with the full schema.

    StaticPool keeps a single connection open, so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _create_user(session: AsyncSession, phone_number: str, name: str) -> User:
    # Hash value is irrelevant for tests that never log in
    user = User(phone_number=phone_number, password_hash="not-a-real-hash", name=name)
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def alice(db_session) -> User:
    return await _create_user(db_session, "+15550000001", "Alice")


@pytest_asyncio.fixture
async def bob(db_session) -> User:
    return await _create_user(db_session, "+15550000002", "Bob")


@pytest_asyncio.fixture
async def carol(db_session) -> User:
    return await _create_user(db_session, "+15550000003", "Carol")


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """
    Usage:
        response = await test_client.get("/api/users", headers=auth_headers(alice))
    """
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(user.id, user.phone_number)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def sample_png_bytes() -> bytes:
    """PNG signature plus an empty IHDR chunk; enough for type and size checks."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17


@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app over ASGITransport.

    get_db_session is overridden to hand out sessions on the test engine with
    the same commit/rollback behavior as the real dependency.
    """
    from app.main import app

    async def _override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db_session
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
