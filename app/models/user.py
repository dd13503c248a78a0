from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DEFAULT_ROLES: tuple[str, ...] = ("ROLE_USER",)


@dataclass(frozen=True, slots=True)
class User:
    id: int | None
    email: str
    first_name: str = ""
    last_name: str = ""
    roles: tuple[str, ...] = DEFAULT_ROLES  # immutable
    password: str | None = None  # argon2 hash, never plaintext
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @staticmethod
    def new(
        *,
        email: str,
        first_name: str = "",
        last_name: str = "",
        roles: tuple[str, ...] | None = None,
        password: str | None = None,
    ) -> User:
        # id stays None until the store assigns one on first save
        return User(
            id=None,
            email=email,
            first_name=first_name,
            last_name=last_name,
            roles=DEFAULT_ROLES if roles is None else roles,
            password=password,
        )
