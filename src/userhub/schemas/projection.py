"""Field selection for list responses.

``fields=name,email`` keeps ``id`` plus the named attributes of each
``UserPublic``; anything outside that allow-list is rejected rather than
silently dropped.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..errors import BadRequestError
from .user import UserPublic

ALWAYS_INCLUDED = "id"
PROJECTABLE_FIELDS: frozenset[str] = frozenset(UserPublic.model_fields)


def parse_fields(raw: str | None) -> tuple[str, ...] | None:
    """Split a ``fields`` query value; ``None`` means "no projection"."""
    if raw is None:
        return None
    requested: list[str] = []
    for name in (part.strip() for part in raw.split(",")):
        if not name or name in requested:
            continue
        if name not in PROJECTABLE_FIELDS:
            raise BadRequestError(f"Unknown field '{name}'.", param="fields")
        requested.append(name)
    return tuple(requested) if requested else None


def project(user: UserPublic, fields: Iterable[str] | None) -> dict[str, Any]:
    """JSON-ready dict of ``user`` limited to ``id`` and ``fields``."""
    if fields is None:
        return user.model_dump(mode="json")
    return user.model_dump(mode="json", include={ALWAYS_INCLUDED, *fields})


__all__ = ["PROJECTABLE_FIELDS", "parse_fields", "project"]
