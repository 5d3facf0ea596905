"""
Pytest configuration and shared fixtures for backend tests.
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are read at import time by several modules, so the environment
# must be in place before anything from the app is imported.
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-jwt-secret-key-for-testing-purposes-only-min-32-chars"
os.environ["AES_SECRET_KEY"] = "0123456789abcdef0123456789abcdef"
os.environ["JWT_EXPIRES_IN"] = "7d"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path and environment are set
from core.security import PasswordHasher, SymmetricCipher, TokenService
from infrastructure.database.connection import get_db
from infrastructure.database.models import Base, User
from services.user_service import UserService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_AES_KEY = os.environ["AES_SECRET_KEY"]
TEST_JWT_SECRET = os.environ["JWT_SECRET"]
TEST_PASSWORD = "TestPass123"
TEST_AADHAAR = "123456789012"


class FrozenClock:
    """Controllable clock for TokenService."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def cipher() -> SymmetricCipher:
    return SymmetricCipher(TEST_AES_KEY)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret_key=TEST_JWT_SECRET)


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def user_service(db_session: AsyncSession, password_hasher, cipher) -> UserService:
    return UserService(db_session, password_hasher, cipher)


@pytest.fixture
async def test_user(user_service: UserService) -> User:
    """Create a registered test user."""
    return await user_service.create_user(
        email="test@example.com",
        password=TEST_PASSWORD,
        aadhaar=TEST_AADHAAR,
        name="Test User",
    )


@pytest.fixture
def auth_headers(test_user: User, token_service: TokenService) -> dict:
    """Generate authentication headers for test user."""
    token = token_service.issue(test_user.id, test_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    # Import app here so the environment above is already applied
    from main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    # Reset rate limiter state between tests to prevent cross-test 429s
    app.state.limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
