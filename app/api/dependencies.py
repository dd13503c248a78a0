from __future__ import annotations

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import async_session_factory, get_async_session
from app.repos.pg_user_repo import PgUserRepo
from app.repos.user_repo import InMemoryUserRepo, UserRepo

# Shared store for deployments without DATABASE_URL (local dev, tests).
user_repo = InMemoryUserRepo()


def _in_memory_user_repo() -> Generator[UserRepo, None, None]:
    """Yields the shared in-memory repo; staged writes are dropped on error."""
    try:
        yield user_repo
    except Exception:
        user_repo.rollback()
        raise


def _pg_user_repo(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> UserRepo:
    """PgUserRepo bound to the request-scoped session."""
    return PgUserRepo(session)


# ---------------------------------------------------------------------------
# Selected once at import time, same as the engine itself
# ---------------------------------------------------------------------------

if async_session_factory is not None:
    get_user_repo = _pg_user_repo
else:
    get_user_repo = _in_memory_user_repo
