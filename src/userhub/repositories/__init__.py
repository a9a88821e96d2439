"""Persistence repositories."""

from __future__ import annotations

from .users import UserRepository, UserSort

__all__ = ["UserRepository", "UserSort"]
