"""Request and response bodies for the users API.

Field rules here are the validation policy for user input: a failing field
is reported back as ``param`` by the request validation handler.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from ..models import PASSWORD_MIN_LENGTH, UserRole
from ..models.user import NAME_MAX_LENGTH

UserName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH),
]
Password = Annotated[str, Field(min_length=PASSWORD_MIN_LENGTH)]


def normalise_email(value: str) -> str:
    """Emails are compared and stored trimmed and lower-cased."""
    return value.strip().lower()


class UserCreate(BaseModel):
    """Registration payload."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "analytical",
                "role": UserRole.USER.value,
            }
        }
    )

    name: UserName
    email: EmailStr
    password: Password
    role: UserRole = UserRole.USER

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return normalise_email(value)


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields are left untouched."""

    name: UserName | None = None
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str | None) -> str | None:
        return normalise_email(value) if value is not None else None


class PasswordChange(BaseModel):
    password: Password


class UserPublic(BaseModel):
    """Serialized user; the password hash is never part of it."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "4f1c2b9a6d3e4f5a8b7c6d5e4f3a2b1c",
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "role": UserRole.USER.value,
                "created_at": "2024-01-01T12:00:00Z",
            }
        },
    )

    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime


__all__ = [
    "PasswordChange",
    "UserCreate",
    "UserPublic",
    "UserUpdate",
    "normalise_email",
]
