"""Database wiring for the users store.

With DATABASE_URL set, user rows live in PostgreSQL (asyncpg driver) and
each request gets its own AsyncSession. Without it, `engine` and
`async_session_factory` are None and the API uses InMemoryUserRepo.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _users_engine(url: str) -> AsyncEngine:
    # pre-ping drops pooled connections the server already closed
    return create_async_engine(url, echo=SETTINGS.is_dev, pool_pre_ping=True)


engine = _users_engine(SETTINGS.database_url) if SETTINGS.database_url else None
async_session_factory = (
    async_sessionmaker(engine, expire_on_commit=False) if engine is not None else None
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. PgUserRepo commits; anything uncommitted is
    rolled back when the request fails."""
    if async_session_factory is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("User store: in-memory (no DATABASE_URL)")
        yield
        return

    # Fail at startup, not on the first /api/users call.
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1 FROM users LIMIT 1"))
    logger.info("User store: postgres host=%s db=%s", engine.url.host, engine.url.database)
    try:
        yield
    finally:
        await engine.dispose()
