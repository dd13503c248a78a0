"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import UserRow
from app.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_active(self) -> list[User]:
        stmt = select(UserRow).where(UserRow.deleted_at.is_(None)).order_by(UserRow.id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(row) for row in rows]

    async def find_by_id(self, user_id: int) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def save(self, user: User) -> User:
        if user.id is None:
            row = UserRow(
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                roles=list(user.roles),
                password=user.password,
                deleted_at=user.deleted_at,
            )
            self._session.add(row)
            # flush so the serial id is assigned
            await self._session.flush()
            return _row_to_user(row)

        stmt = (
            update(UserRow)
            .where(UserRow.id == user.id)
            .values(
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                roles=list(user.roles),
                password=user.password,
                deleted_at=user.deleted_at,
            )
        )
        await self._session.execute(stmt)
        return user

    async def soft_delete(self, user: User) -> User:
        deleted_at = datetime.now(timezone.utc)
        stmt = (
            update(UserRow).where(UserRow.id == user.id).values(deleted_at=deleted_at)
        )
        await self._session.execute(stmt)
        return replace(user, deleted_at=deleted_at)

    async def commit(self) -> None:
        await self._session.commit()


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name or "",
        last_name=row.last_name or "",
        roles=tuple(row.roles) if row.roles else (),
        password=row.password,
        deleted_at=row.deleted_at,
    )
