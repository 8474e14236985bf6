"""Async engine and session factory for the league store (SQLite or PostgreSQL)."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Register table metadata
from prediction_league import models  # noqa: F401

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = (
    ("sqlite://", "sqlite+aiosqlite://"),
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
)


def get_database_url(url: str) -> str:
    """Rewrite a plain DATABASE_URL to use the async driver for its scheme."""
    for prefix, async_prefix in ASYNC_DRIVERS:
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url


def create_engine(url: str) -> AsyncEngine:
    database_url = get_database_url(url)

    if database_url.startswith("sqlite"):
        # One shared connection so an in-memory database survives across sessions
        return create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,
    )


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create any missing league tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(f"[DB] Schema ready ({engine.url.get_backend_name()})")


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("[DB] Engine disposed")
