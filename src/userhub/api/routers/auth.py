"""Token issuance for basic-auth clients."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ...core.permissions import UserAction
from ...deps import SettingsDependency, require_requester
from ...models import User
from ...schemas import AuthResponse, UserPublic
from ...services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

PasswordAuthenticated = Annotated[User, Depends(require_requester(UserAction.AUTHENTICATE))]


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Exchange email and password for an access token",
)
async def authenticate(user: PasswordAuthenticated, settings: SettingsDependency) -> AuthResponse:
    token = AuthService(settings).issue_token(user)
    return AuthResponse(
        token=token.token,
        expires_at=token.expires_at,
        user=UserPublic.model_validate(user),
    )
