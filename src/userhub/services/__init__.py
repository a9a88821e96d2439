"""Domain service layer."""

from __future__ import annotations

from .auth import AuthService
from .users import UserService

__all__ = ["AuthService", "UserService"]
