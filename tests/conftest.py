import os
import uuid
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.core.passwords import hash_password
from app.models.base import Base

# Per-test SQLite file by default; set TEST_DATABASE_URL to run against
# PostgreSQL (postgresql+asyncpg://...) instead.
_EXTERNAL_TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "")

# Test user ID (consistent across tests for predictable auth)
TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "test@example.com"
TEST_PASSWORD = "correct-horse"  # nosec B105

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105

# User B constants (cross-tenant testing counterpart to TEST_USER_ID)
USER_B_ID = uuid.UUID("00000000-0000-0000-0000-000000000099")
USER_B_EMAIL = "userb@example.com"

# Low cost factor for fast tests
_TEST_HASH_ROUNDS = 4


def create_test_jwt(
    user_id: uuid.UUID = TEST_USER_ID,
    *,
    secret: str = TEST_AUTH_SECRET,
    expires_delta: timedelta | None = None,
    iat: datetime | None = None,
) -> str:
    """Create a signed session token for test authentication.

    Args:
        user_id: User UUID to encode in the sub claim.
        secret: Signing secret (must match settings.auth_secret in tests).
        expires_delta: Time until expiration. Defaults to 7 days.
        iat: Issued-at time. Defaults to now.

    Returns:
        Encoded JWT string.
    """
    now = iat or datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + (expires_delta or timedelta(days=7)),
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def auth_settings() -> Iterator[None]:
    """Use the test signing secret and a cheap bcrypt cost for every test."""
    original_secret = settings.auth_secret
    original_rounds = settings.password_hash_rounds
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)
    settings.password_hash_rounds = _TEST_HASH_ROUNDS

    yield

    settings.auth_secret = original_secret
    settings.password_hash_rounds = original_rounds


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema."""
    url = _EXTERNAL_TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


# =============================================================================
# Users
# =============================================================================


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Create the primary test user with a known password."""
    from app.models import User

    user = User(
        id=TEST_USER_ID,
        name="Test User",
        email=TEST_USER_EMAIL,
        password_hash=hash_password(TEST_PASSWORD),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    yield user


@pytest_asyncio.fixture
async def user_b(db_session: AsyncSession):
    """Create User B for cross-tenant isolation tests."""
    from app.models import User

    user = User(
        id=USER_B_ID,
        name="User B",
        email=USER_B_EMAIL,
        password_hash=hash_password("user-b-password"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    yield user


# =============================================================================
# API Clients
# =============================================================================


@asynccontextmanager
async def _api_client(
    db_engine: AsyncEngine,
    cookies: dict[str, str] | None = None,
) -> AsyncGenerator[AsyncClient, None]:
    """Yield an AsyncClient bound to the app with get_db pointed at the test DB."""
    from app.core.database import get_db
    from app.main import app

    test_session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies=cookies,
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(
    db_engine,
    test_user,  # noqa: ARG001 - ensures user exists
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client authenticated as TEST_USER_ID via session cookie."""
    async with _api_client(
        db_engine, cookies={settings.auth_cookie_name: create_test_jwt(TEST_USER_ID)}
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def unauthenticated_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client without a session cookie."""
    async with _api_client(db_engine) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_user_b(
    db_engine,
    user_b,  # noqa: ARG001 - ensures user_b exists in DB
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as User B for cross-tenant tests."""
    async with _api_client(
        db_engine, cookies={settings.auth_cookie_name: create_test_jwt(USER_B_ID)}
    ) as ac:
        yield ac
