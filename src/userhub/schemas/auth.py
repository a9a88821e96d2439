"""Token issuance payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .user import UserPublic


class AuthResponse(BaseModel):
    """Returned by ``POST /auth``."""

    token: str
    expires_at: datetime
    user: UserPublic


class TokenPayload(BaseModel):
    """Claims of a verified access token."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    role: str | None = None
    exp: datetime
    iat: datetime


__all__ = ["AuthResponse", "TokenPayload"]
