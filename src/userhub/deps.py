"""Reusable FastAPI dependencies."""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)
from fastapi.security.utils import get_authorization_scheme_param
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings
from .core.credentials import (
    Credential,
    CredentialKind,
    PasswordCredential,
    TokenCredential,
    token_from_request,
)
from .core.permissions import UserAction, may_access, may_act_on, rule_for
from .db.session import get_session
from .errors import UnauthorizedError
from .models import User
from .repositories import UserRepository


class _Utf8HTTPBasic(HTTPBasic):
    """``HTTPBasic`` that decodes credentials as UTF-8 and never raises.

    Malformed headers yield ``None`` so they fail with the same 401 as any
    other bad credential.
    """

    async def __call__(self, request: Request) -> HTTPBasicCredentials | None:
        scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
        if scheme.lower() != "basic" or not param:
            return None
        try:
            decoded = base64.b64decode(param, validate=True).decode("utf-8")
        except ValueError:
            return None
        username, separator, password = decoded.partition(":")
        if not separator:
            return None
        return HTTPBasicCredentials(username=username, password=password)


_bearer_scheme = HTTPBearer(auto_error=False)
_basic_scheme = _Utf8HTTPBasic(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings of the application serving this request."""
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    async for session in get_session(request):
        yield session


SettingsDependency = Annotated[Settings, Depends(get_app_settings)]
DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


async def _token_credential(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Credential | None:
    token = await token_from_request(request, bearer.credentials if bearer else None)
    return TokenCredential(token) if token else None


async def _password_credential(
    basic: HTTPBasicCredentials | None = Depends(_basic_scheme),
) -> Credential | None:
    if basic is None:
        return None
    return PasswordCredential(email=basic.username, password=basic.password)


def _scheme_name(kind: CredentialKind | None) -> str:
    return "Basic" if kind is CredentialKind.PASSWORD else "Bearer"


def require_requester(action: UserAction) -> Callable[..., Awaitable[User]]:
    """Dependency resolving the caller for ``action`` or failing with 401.

    Only the credential kind the action's rule names is looked for; a valid
    token does not satisfy an action that requires the current password.
    """
    rule = rule_for(action)
    if rule.credential is None:
        raise ValueError(f"Action {action.value!r} is public and has no requester.")
    extractor = _password_credential if rule.credential is CredentialKind.PASSWORD else _token_credential
    scheme = _scheme_name(rule.credential)

    async def _dependency(
        session: DatabaseSessionDependency,
        settings: SettingsDependency,
        credential: Credential | None = Depends(extractor),
    ) -> User:
        if credential is None:
            raise UnauthorizedError(scheme=scheme)
        user = await credential.resolve(UserRepository(session), settings)
        if user is None or not may_access(action, user, credential.kind):
            raise UnauthorizedError(scheme=scheme)
        return user

    return _dependency


def ensure_may_act_on(action: UserAction, requester: User, target: User) -> None:
    """Raise 401 unless ``requester`` may perform ``action`` on ``target``."""
    if not may_act_on(action, requester, target.id):
        raise UnauthorizedError(scheme=_scheme_name(rule_for(action).credential))


__all__ = [
    "DatabaseSessionDependency",
    "SettingsDependency",
    "ensure_may_act_on",
    "get_app_settings",
    "get_db_session",
    "require_requester",
]
