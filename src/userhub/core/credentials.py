"""Credentials a request can present, and how each resolves to a user.

An endpoint accepts exactly one kind: most take an access token, while
password changes demand the account's current password over basic auth.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from pydantic import ValidationError
from starlette.requests import Request

from ..models import User
from ..repositories import UserRepository
from ..schemas.auth import TokenPayload
from ..schemas.user import normalise_email
from .config import Settings
from .security import JWTError, decode_token, verify_password

ACCESS_TOKEN_PARAM = "access_token"


class CredentialKind(str, Enum):
    TOKEN = "token"
    PASSWORD = "password"


@dataclass(frozen=True, slots=True)
class TokenCredential:
    """A signed access token whose subject is a user id."""

    kind: ClassVar[CredentialKind] = CredentialKind.TOKEN

    token: str

    async def resolve(self, repository: UserRepository, settings: Settings) -> User | None:
        try:
            claims = decode_token(token=self.token, settings=settings)
            payload = TokenPayload.model_validate(claims)
        except (JWTError, ValidationError):
            return None
        return await repository.get(payload.sub)


@dataclass(frozen=True, slots=True)
class PasswordCredential:
    """Email and plaintext password, checked against the stored hash."""

    kind: ClassVar[CredentialKind] = CredentialKind.PASSWORD

    email: str
    password: str

    async def resolve(self, repository: UserRepository, settings: Settings) -> User | None:
        user = await repository.get_by_email(normalise_email(self.email))
        if user is None or not verify_password(self.password, user.hashed_password):
            return None
        return user

    def __repr__(self) -> str:
        return f"PasswordCredential(email={self.email!r}, password='***')"


Credential = Union[TokenCredential, PasswordCredential]


async def token_from_request(request: Request, bearer: str | None = None) -> str | None:
    """Find an access token in the bearer header, query string or JSON body, in that order."""
    if bearer:
        return bearer
    token = request.query_params.get(ACCESS_TOKEN_PARAM)
    if token:
        return token
    # Starlette caches the body, so FastAPI can still parse it afterwards.
    body = await request.body()
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if isinstance(data, dict):
        value = data.get(ACCESS_TOKEN_PARAM)
        if isinstance(value, str) and value:
            return value
    return None


__all__ = [
    "ACCESS_TOKEN_PARAM",
    "Credential",
    "CredentialKind",
    "PasswordCredential",
    "TokenCredential",
    "token_from_request",
]
