"""User persistence model."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

import sqlalchemy as sa
from sqlmodel import Field

from .common import TimestampMixin

EMAIL_MAX_LENGTH = 320
NAME_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6


class UserRole(str, Enum):
    """Roles a user account can hold."""

    USER = "user"
    ADMIN = "admin"


def new_user_id() -> str:
    """Opaque identifier for a new account."""
    return uuid4().hex


class User(TimestampMixin, table=True):
    """Persistent user account. ``hashed_password`` never leaves the service layer."""

    __tablename__ = "users"
    __table_args__ = (sa.Index("ix_users_name", "name"),)

    id: str = Field(
        default_factory=new_user_id,
        sa_column=sa.Column(sa.String(length=32), primary_key=True),
    )
    name: str = Field(
        max_length=NAME_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=NAME_MAX_LENGTH), nullable=False),
    )
    email: str = Field(
        max_length=EMAIL_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=EMAIL_MAX_LENGTH), nullable=False, unique=True),
    )
    hashed_password: str = Field(
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=sa.Column(
            sa.Enum(
                UserRole,
                name="user_role",
                native_enum=False,
                length=16,
                values_callable=lambda roles: [role.value for role in roles],
                validate_strings=True,
            ),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = [
    "EMAIL_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "User",
    "UserRole",
    "new_user_id",
]
