"""Entity-level validation for User.

validate_user() checks a whole User and returns {field: message} using the
API's field names. An empty dict means the user is valid. The function is
pure: it never touches the store.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from app.models.user import User

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

BLANK_MESSAGE = "This value should not be blank."
INVALID_EMAIL_MESSAGE = "This value is not a valid email address."


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank", BLANK_MESSAGE)
    return value


class _UserConstraints(BaseModel):
    email: str = Field(max_length=180)
    firstName: str = Field(max_length=255)
    lastName: str = Field(max_length=255)
    roles: list[str]

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        _not_blank(value)
        if not _EMAIL_RE.match(value):
            raise PydanticCustomError("email", INVALID_EMAIL_MESSAGE)
        return value

    @field_validator("firstName", "lastName")
    @classmethod
    def _name(cls, value: str) -> str:
        return _not_blank(value)

    @field_validator("roles")
    @classmethod
    def _roles(cls, value: list[str]) -> list[str]:
        for role in value:
            _not_blank(role)
        return value


def validate_user(user: User) -> dict[str, str]:
    try:
        _UserConstraints(
            email=user.email,
            firstName=user.first_name,
            lastName=user.last_name,
            roles=list(user.roles),
        )
    except ValidationError as e:
        errors: dict[str, str] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "user"
            # first violation per field wins
            errors.setdefault(field, error["msg"])
        return errors
    return {}
