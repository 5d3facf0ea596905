"""Async engine and session management for the user store."""
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import Settings, get_settings
from .models.base import Base

settings = get_settings()


def engine_options(settings: Settings) -> dict[str, Any]:
    """Engine keyword arguments for the configured database."""
    options: dict[str, Any] = {
        "echo": settings.database_echo,
        "pool_pre_ping": True,
    }

    # SQLite (tests, local runs) has no queue pool to size
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=10,
            pool_recycle=3600,
        )

    # Aadhaar ciphertexts and password hashes cross this connection
    if settings.is_production:
        options["connect_args"] = {"ssl": "require"}

    return options


engine = create_async_engine(settings.database_url, **engine_options(settings))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; rolled back if the request fails."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the users table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections."""
    await engine.dispose()
