"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import AuthResponse, TokenPayload
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .user import PasswordChange, UserCreate, UserPublic, UserUpdate, normalise_email

__all__ = [
    "AuthResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "PasswordChange",
    "RootResponse",
    "TokenPayload",
    "UserCreate",
    "UserPublic",
    "UserUpdate",
    "normalise_email",
]
