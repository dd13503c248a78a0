from __future__ import annotations

import asyncio

from app.models.user import User
from app.repos.user_repo import InMemoryUserRepo
from app.services import password_service, users_service
from app.services.users_service import UserCreateData, UserPatch


def _create(repo: InMemoryUserRepo, email: str = "a@x.com", **kwargs) -> User:
    data = UserCreateData(
        email=email,
        first_name=kwargs.pop("first_name", "A"),
        last_name=kwargs.pop("last_name", "B"),
        **kwargs,
    )
    result = asyncio.run(users_service.create_user(repo, data))
    assert result.ok, result.errors
    assert result.user is not None
    return result.user


# ---- create ----


def test_create_user_assigns_id_and_default_roles(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    assert user.id == 1
    assert user.roles == ("ROLE_USER",)
    assert user.password is None
    assert user.deleted_at is None


def test_created_user_is_retrievable_and_listed(repo: InMemoryUserRepo) -> None:
    user = _create(repo)

    fetched = asyncio.run(users_service.get_user_by_id(repo, user.id))
    assert fetched == user

    active = asyncio.run(users_service.get_all_users(repo))
    assert [u.id for u in active] == [user.id]


def test_create_user_keeps_explicit_roles(repo: InMemoryUserRepo) -> None:
    user = _create(repo, roles=("ROLE_ADMIN", "ROLE_USER"))
    assert user.roles == ("ROLE_ADMIN", "ROLE_USER")


def test_create_user_hashes_password(repo: InMemoryUserRepo) -> None:
    user = _create(repo, password="s3cret-pass")
    assert user.password is not None
    assert user.password != "s3cret-pass"
    assert user.password.startswith("$argon2")
    assert password_service.verify_password("s3cret-pass", user.password)


def test_create_user_rejects_duplicate_email(repo: InMemoryUserRepo) -> None:
    _create(repo)

    result = asyncio.run(
        users_service.create_user(
            repo, UserCreateData(email="a@x.com", first_name="C", last_name="D")
        )
    )

    assert not result.ok
    assert result.user is None
    assert result.errors == {"email": users_service.EMAIL_IN_USE_MESSAGE}
    assert len(asyncio.run(users_service.get_all_users(repo))) == 1


def test_create_user_reports_validation_errors_and_saves_nothing(
    repo: InMemoryUserRepo,
) -> None:
    result = asyncio.run(
        users_service.create_user(repo, UserCreateData(email="not-an-email"))
    )

    assert not result.ok
    assert set(result.errors) == {"email", "firstName", "lastName"}
    assert asyncio.run(users_service.get_all_users(repo)) == []


def test_create_user_with_no_data_defaults_to_empty_strings(
    repo: InMemoryUserRepo,
) -> None:
    result = asyncio.run(users_service.create_user(repo, UserCreateData()))
    assert "email" in result.errors
    assert asyncio.run(users_service.get_all_users(repo)) == []


# ---- is_email_in_use ----


def test_is_email_in_use(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    assert asyncio.run(users_service.is_email_in_use(repo, "a@x.com")) is True
    assert asyncio.run(users_service.is_email_in_use(repo, "b@x.com")) is False
    assert (
        asyncio.run(users_service.is_email_in_use(repo, "a@x.com", user.id)) is False
    )
    assert asyncio.run(users_service.is_email_in_use(repo, "")) is False


def test_soft_deleted_email_stays_reserved(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    asyncio.run(users_service.delete_user(repo, user))
    assert asyncio.run(users_service.is_email_in_use(repo, "a@x.com")) is True


# ---- update ----


def test_update_user_applies_only_present_fields(repo: InMemoryUserRepo) -> None:
    user = _create(repo)

    result = asyncio.run(
        users_service.update_user(repo, user, UserPatch(first_name="C"))
    )

    assert result.ok
    assert result.user is not None
    assert result.user.first_name == "C"
    assert result.user.last_name == "B"
    assert result.user.email == "a@x.com"
    assert asyncio.run(repo.find_by_id(user.id)) == result.user


def test_update_user_to_own_email_succeeds(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    result = asyncio.run(
        users_service.update_user(repo, user, UserPatch(email="a@x.com"))
    )
    assert result.ok


def test_update_user_rejects_email_of_other_user_atomically(
    repo: InMemoryUserRepo,
) -> None:
    _create(repo, email="taken@x.com")
    user = _create(repo, email="mine@x.com")

    result = asyncio.run(
        users_service.update_user(
            repo, user, UserPatch(email="taken@x.com", first_name="Changed")
        )
    )

    assert result.errors == {"email": users_service.EMAIL_TAKEN_MESSAGE}
    stored = asyncio.run(repo.find_by_id(user.id))
    assert stored is not None
    assert stored.email == "mine@x.com"
    assert stored.first_name == "A"


def test_update_user_validation_failure_leaves_store_untouched(
    repo: InMemoryUserRepo,
) -> None:
    user = _create(repo)

    result = asyncio.run(
        users_service.update_user(repo, user, UserPatch(first_name="Ok", last_name=" "))
    )

    assert result.errors == {"lastName": "This value should not be blank."}
    assert asyncio.run(repo.find_by_id(user.id)) == user


def test_update_user_changes_email_lookup(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    asyncio.run(users_service.update_user(repo, user, UserPatch(email="new@x.com")))

    assert asyncio.run(repo.find_by_email("a@x.com")) is None
    moved = asyncio.run(repo.find_by_email("new@x.com"))
    assert moved is not None
    assert moved.id == user.id


def test_update_user_rehashes_password(repo: InMemoryUserRepo) -> None:
    user = _create(repo, password="first-pass")
    result = asyncio.run(
        users_service.update_user(repo, user, UserPatch(password="second-pass"))
    )
    assert result.user is not None
    assert password_service.verify_password("second-pass", result.user.password)
    assert not password_service.verify_password("first-pass", result.user.password)


# ---- delete ----


def test_delete_user_soft_deletes_once(repo: InMemoryUserRepo) -> None:
    user = _create(repo)

    assert asyncio.run(users_service.delete_user(repo, user)) is True
    assert asyncio.run(users_service.get_all_users(repo)) == []

    stored = asyncio.run(repo.find_by_id(user.id))
    assert stored is not None
    assert stored.is_deleted
    assert asyncio.run(users_service.delete_user(repo, stored)) is False


def test_get_user_by_id_hides_soft_deleted(repo: InMemoryUserRepo) -> None:
    user = _create(repo)
    asyncio.run(users_service.delete_user(repo, user))

    assert asyncio.run(users_service.get_user_by_id(repo, user.id)) is None
    found = asyncio.run(
        users_service.get_user_by_id(repo, user.id, include_deleted=True)
    )
    assert found is not None
    assert found.is_deleted


def test_get_user_by_id_returns_none_for_unknown_id(repo: InMemoryUserRepo) -> None:
    assert asyncio.run(users_service.get_user_by_id(repo, 999)) is None
