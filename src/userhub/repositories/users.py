"""Queries against the ``users`` table."""

from __future__ import annotations

from enum import Enum

import sqlalchemy as sa
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User
from .base import BaseRepository


class UserSort(str, Enum):
    """Orderings accepted by ``GET /users``; a leading ``-`` means descending."""

    NAME = "name"
    NAME_DESC = "-name"
    CREATED_AT = "created_at"
    CREATED_AT_DESC = "-created_at"


class UserRepository(BaseRepository[User]):
    """CRUD and search for ``User`` rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(col(User.email) == email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` if another account already uses ``email``."""
        query = select(User.id).where(col(User.email) == email)
        if exclude_id is not None:
            query = query.where(col(User.id) != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def search(
        self,
        *,
        q: str | None = None,
        sort: UserSort = UserSort.CREATED_AT_DESC,
        limit: int = 30,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """Return one page of users whose name contains ``q``, plus the match count."""
        query = select(User)
        count_query = select(sa.func.count()).select_from(User)
        if q:
            condition = sa.func.lower(col(User.name)).contains(q.lower(), autoescape=True)
            query = query.where(condition)
            count_query = count_query.where(condition)

        column = col(User.name) if sort in {UserSort.NAME, UserSort.NAME_DESC} else col(User.created_at)
        descending = sort.value.startswith("-")
        query = query.order_by(column.desc() if descending else column.asc(), col(User.id))

        result = await self.session.execute(query.limit(limit).offset(offset))
        users = list(result.scalars().all())
        total_result = await self.session.execute(count_query)
        return users, int(total_result.scalar_one())
