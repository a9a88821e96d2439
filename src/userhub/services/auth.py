"""Access token issuance."""

from __future__ import annotations

import logging

from ..core.config import Settings
from ..core.security import GeneratedToken, create_access_token
from ..models import User

logger = logging.getLogger(__name__)


class AuthService:
    """Signs access tokens for users who have proven their password."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def issue_token(self, user: User) -> GeneratedToken:
        token = create_access_token(
            subject=user.id,
            role=user.role.value,
            settings=self._settings,
        )
        logger.info("Access token issued", extra={"user_id": user.id})
        return token


__all__ = ["AuthService"]
