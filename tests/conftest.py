import uuid
from collections.abc import AsyncGenerator, Iterator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from account_auth.core import storage as storage_module
from account_auth.core.auth import hash_password
from account_auth.core.config import settings
from account_auth.core.storage import PublicStorage
from account_auth.models.base import Base
from account_auth.models.personal_access_token import PersonalAccessToken
from account_auth.models.user import User

# In-memory SQLite shared across sessions through a single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TEST_EMAIL = "test@example.com"
TEST_PASSWORD = "ValidP@ss1"  # nosec B105  # gitleaks:allow

# Low cost factor for fast tests
_BCRYPT_ROUNDS = 4


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture(autouse=True)
def fast_hashing() -> Iterator[None]:
    """Use a low bcrypt cost factor for every hash made during tests."""
    original = settings.bcrypt_rounds
    settings.bcrypt_rounds = _BCRYPT_ROUNDS
    yield
    settings.bcrypt_rounds = original


@pytest.fixture(autouse=True)
def mail_outbox() -> Iterator[AsyncMock]:
    """Capture outgoing mail instead of calling Resend.

    Yields:
        AsyncMock standing in for the transport; each call's kwargs hold
        to_email, subject and text.
    """
    with patch("account_auth.core.email._send", new_callable=AsyncMock) as send:
        yield send


@pytest.fixture
def storage(tmp_path) -> Iterator[PublicStorage]:
    """Public storage rooted in a temporary directory."""
    instance = PublicStorage(tmp_path / "public", "http://test/storage")
    storage_module._storage = instance
    yield instance
    storage_module.reset_storage()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create an unverified user with a known password."""
    user = User(
        id=TEST_USER_ID,
        name="Test User",
        email=TEST_EMAIL,
        password_hash=hash_password(TEST_PASSWORD),
        contact_number="07911123456",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def client(
    db_engine, storage: PublicStorage
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the test database and storage.

    Sets up:
    - Test database connection via dependency override
    - Storage rooted in tmp_path
    - httpx.AsyncClient with ASGI transport

    Yields:
        AsyncClient without credentials. Tests add a bearer header.
    """
    from account_auth.core.database import get_db
    from account_auth.core.storage import get_storage
    from account_auth.main import app

    test_session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def login(client: AsyncClient, email: str = TEST_EMAIL) -> str:
    """Log in through the API and return the bearer token."""
    response = await client.post(
        "/api/login", json={"email": email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    """Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}


async def count_tokens(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Number of access token records held by a user."""
    stmt = select(func.count()).where(PersonalAccessToken.user_id == user_id)
    result = await db.execute(stmt)
    return int(result.scalar_one())


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Security: Rate limiting is tested separately; disable for other tests
    to avoid flaky failures from rate limit triggers.

    Yields:
        None (autouse fixture).
    """
    from account_auth.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    limiter.enabled = original_enabled
