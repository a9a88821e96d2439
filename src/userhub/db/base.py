"""Metadata registry shared by table creation and Alembic."""

from __future__ import annotations

from sqlmodel import SQLModel

from .. import models  # noqa: F401  registers table models on SQLModel.metadata

metadata = SQLModel.metadata

__all__ = ["SQLModel", "metadata"]
