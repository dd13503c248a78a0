from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from app.models.user import User
from app.repos.user_repo import UserRepo
from app.services import password_service
from app.services.user_validation import validate_user

logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = "Email is already in use"
EMAIL_TAKEN_MESSAGE = "This email is already taken."


@dataclass(frozen=True)
class UserCreateData:
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    roles: tuple[str, ...] | None = None
    password: str | None = None


@dataclass(frozen=True)
class UserPatch:
    """Partial update: None means "leave the field alone"."""

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    roles: tuple[str, ...] | None = None
    password: str | None = None


@dataclass(frozen=True)
class UserResult:
    user: User | None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


async def get_all_users(repo: UserRepo) -> list[User]:
    return await repo.find_active()


async def get_user_by_id(
    repo: UserRepo, user_id: int, *, include_deleted: bool = False
) -> User | None:
    user = await repo.find_by_id(user_id)
    if user is None:
        return None
    if user.is_deleted and not include_deleted:
        return None
    return user


async def is_email_in_use(
    repo: UserRepo, email: str, exclude_user_id: int | None = None
) -> bool:
    existing = await repo.find_by_email(email)
    if existing is None:
        return False
    if exclude_user_id is not None and existing.id == exclude_user_id:
        return False
    return True


async def create_user(repo: UserRepo, data: UserCreateData) -> UserResult:
    email = data.email or ""
    if await is_email_in_use(repo, email):
        logger.warning("Rejected duplicate email=%s", email)
        return UserResult(user=None, errors={"email": EMAIL_IN_USE_MESSAGE})

    user = User.new(
        email=email,
        first_name=data.first_name or "",
        last_name=data.last_name or "",
        roles=data.roles,
    )
    if data.password:
        user = replace(user, password=password_service.hash_password(data.password))

    errors = validate_user(user)
    if errors:
        logger.warning("Rejected invalid user fields=%s", sorted(errors))
        return UserResult(user=None, errors=errors)

    user = await repo.save(user)
    await repo.commit()
    logger.info("Created user id=%d email=%s", user.id, user.email)
    return UserResult(user=user)


async def update_user(repo: UserRepo, user: User, data: UserPatch) -> UserResult:
    # Uniqueness first, so a conflicting request changes nothing at all.
    if data.email is not None and await is_email_in_use(repo, data.email, user.id):
        logger.warning("Rejected email change user_id=%s email=%s", user.id, data.email)
        return UserResult(user=None, errors={"email": EMAIL_TAKEN_MESSAGE})

    changes: dict[str, object] = {}
    if data.email is not None:
        changes["email"] = data.email
    if data.first_name is not None:
        changes["first_name"] = data.first_name
    if data.last_name is not None:
        changes["last_name"] = data.last_name
    if data.roles is not None:
        changes["roles"] = data.roles
    if data.password:
        changes["password"] = password_service.hash_password(data.password)
    updated = replace(user, **changes)

    errors = validate_user(updated)
    if errors:
        logger.warning(
            "Rejected update user_id=%s fields=%s", user.id, sorted(errors)
        )
        return UserResult(user=None, errors=errors)

    updated = await repo.save(updated)
    await repo.commit()
    logger.info("Updated user id=%d fields=%s", updated.id, sorted(changes))
    return UserResult(user=updated)


async def delete_user(repo: UserRepo, user: User) -> bool:
    """Soft-delete. Returns False when the user was already deleted."""
    if user.is_deleted:
        logger.info("User id=%s already deleted", user.id)
        return False

    await repo.soft_delete(user)
    await repo.commit()
    logger.info("Soft-deleted user id=%d", user.id)
    return True
