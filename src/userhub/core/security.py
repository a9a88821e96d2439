"""Password hashing and JWT access token helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(slots=True)
class GeneratedToken:
    """A signed access token and its expiry."""

    token: str
    expires_at: datetime


def configure_password_hashing(rounds: int) -> None:
    """Set the bcrypt work factor used for newly hashed passwords."""
    pwd_context.update(bcrypt__rounds=rounds)


def get_password_hash(password: str) -> str:
    """Return a bcrypt hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    *,
    subject: str,
    role: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> GeneratedToken:
    """Sign a JWT whose ``sub`` claim is the user id."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expires_at = now + expires_delta
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return GeneratedToken(token=token, expires_at=expires_at)


def decode_token(*, token: str, settings: Settings) -> dict[str, Any]:
    """Verify signature and expiry, returning the claims; raises ``JWTError``."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


__all__ = [
    "GeneratedToken",
    "JWTError",
    "configure_password_hashing",
    "create_access_token",
    "decode_token",
    "get_password_hash",
    "pwd_context",
    "verify_password",
]
