from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from app.models.user import User


class UserRepo(Protocol):
    async def find_active(self) -> list[User]: ...
    async def find_by_id(self, user_id: int) -> User | None: ...
    async def find_by_email(self, email: str) -> User | None: ...
    async def save(self, user: User) -> User: ...
    async def soft_delete(self, user: User) -> User: ...
    async def commit(self) -> None: ...


class InMemoryUserRepo:
    """Dict-backed store with a pending-write buffer.

    Writes from save()/soft_delete() are staged and only become visible to
    readers after commit(), the way a database transaction behaves.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, User] = {}
        self._by_email: dict[str, User] = {}
        self._pending: dict[int, User] = {}
        self._next_id = 1

    async def find_active(self) -> list[User]:
        return [u for _, u in sorted(self._by_id.items()) if not u.is_deleted]

    async def find_by_id(self, user_id: int) -> User | None:
        return self._by_id.get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        return self._by_email.get(email)

    async def save(self, user: User) -> User:
        if user.id is None:
            user = replace(user, id=self._next_id)
            self._next_id += 1
        self._pending[user.id] = user
        return user

    async def soft_delete(self, user: User) -> User:
        deleted = replace(user, deleted_at=datetime.now(timezone.utc))
        return await self.save(deleted)

    async def commit(self) -> None:
        # Unique email, same as the users.email constraint in Postgres.
        for user in self._pending.values():
            owner = self._by_email.get(user.email)
            if owner is not None and owner.id != user.id:
                self._pending.clear()
                raise ValueError("email already exists")

        for user in self._pending.values():
            previous = self._by_id.get(user.id)
            if previous is not None and previous.email != user.email:
                del self._by_email[previous.email]
            self._by_id[user.id] = user
            self._by_email[user.email] = user
        self._pending.clear()

    def rollback(self) -> None:
        self._pending.clear()

    def clear(self) -> None:
        self._by_id.clear()
        self._by_email.clear()
        self._pending.clear()
        self._next_id = 1
