"""SQLModel table definitions."""

from __future__ import annotations

from .common import TimestampMixin, utcnow
from .user import PASSWORD_MIN_LENGTH, User, UserRole

__all__ = ["PASSWORD_MIN_LENGTH", "TimestampMixin", "User", "UserRole", "utcnow"]
