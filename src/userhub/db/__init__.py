"""Database wiring."""

from __future__ import annotations

from .session import create_engine, create_session_factory, get_session, init_db

__all__ = ["create_engine", "create_session_factory", "get_session", "init_db"]
