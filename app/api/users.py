from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.api.dependencies import get_user_repo
from app.models.user import User
from app.repos.user_repo import UserRepo
from app.services import users_service
from app.services.users_service import UserCreateData, UserPatch

logger = logging.getLogger(__name__)

# Endpoint logic for /api/users. No business rules here: each handler
# delegates to users_service and picks the status code.

router = APIRouter(prefix="/api/users", tags=["users"])

Repo = Annotated[UserRepo, Depends(get_user_repo)]


# --- Request / Response schemas -------------------------------------------


class UserOut(BaseModel):
    """Read view: never carries the password hash."""

    id: int
    email: str
    firstName: str
    lastName: str
    roles: list[str]


class UserCreateIn(BaseModel):
    email: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    roles: list[str] | None = None
    password: str | None = Field(default=None, min_length=1)


class UserUpdateIn(BaseModel):
    email: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    roles: list[str] | None = None
    password: str | None = Field(default=None, min_length=1)


def _to_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        firstName=user.first_name,
        lastName=user.last_name,
        roles=list(user.roles),
    )


def _roles(roles: list[str] | None) -> tuple[str, ...] | None:
    return None if roles is None else tuple(roles)


def _errors(errors: dict[str, str]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors}
    )


def _not_found(user_id: int) -> HTTPException:
    logger.info("User id=%d not found", user_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
    )


# --- GET /api/users -------------------------------------------------------


@router.get("", response_model=list[UserOut])
async def get_all_users(repo: Repo) -> list[UserOut]:
    users = await users_service.get_all_users(repo)
    return [_to_out(u) for u in users]


# --- GET /api/users/{user_id} ---------------------------------------------


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, repo: Repo) -> UserOut:
    user = await users_service.get_user_by_id(repo, user_id)
    if user is None:
        raise _not_found(user_id)
    return _to_out(user)


# --- POST /api/users ------------------------------------------------------


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Validation failed"}},
)
async def create_user(payload: UserCreateIn, repo: Repo) -> UserOut | JSONResponse:
    result = await users_service.create_user(
        repo,
        UserCreateData(
            email=payload.email,
            first_name=payload.firstName,
            last_name=payload.lastName,
            roles=_roles(payload.roles),
            password=payload.password,
        ),
    )
    if not result.ok:
        return _errors(result.errors)
    return _to_out(result.user)


# --- PUT /api/users/{user_id} ---------------------------------------------


@router.put(
    "/{user_id}",
    response_model=UserOut,
    responses={400: {"description": "Validation failed"}, 404: {}},
)
async def update_user(
    user_id: int, payload: UserUpdateIn, repo: Repo
) -> UserOut | JSONResponse:
    user = await users_service.get_user_by_id(repo, user_id)
    if user is None:
        raise _not_found(user_id)

    result = await users_service.update_user(
        repo,
        user,
        UserPatch(
            email=payload.email,
            first_name=payload.firstName,
            last_name=payload.lastName,
            roles=_roles(payload.roles),
            password=payload.password,
        ),
    )
    if not result.ok:
        return _errors(result.errors)
    return _to_out(result.user)


# --- DELETE /api/users/{user_id} ------------------------------------------


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {}, 410: {}},
)
async def delete_user(user_id: int, repo: Repo) -> Response:
    # Soft-deleted users are still looked up here so a repeat DELETE is 410.
    user = await users_service.get_user_by_id(repo, user_id, include_deleted=True)
    if user is None:
        raise _not_found(user_id)

    if not await users_service.delete_user(repo, user):
        raise HTTPException(
            status_code=status.HTTP_410_GONE, detail="User already deleted"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
