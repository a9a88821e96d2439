"""Business operations on user accounts."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import get_password_hash
from ..errors import ConflictError, NotFoundError
from ..models import User, UserRole
from ..repositories import UserRepository, UserSort

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email is already registered."


class UserService:
    """Create, look up, search, update and delete ``User`` records."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Persist a new account; raises ``ConflictError`` if the email is in use."""
        if await self._repository.email_taken(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE, param="email")
        user = User(
            name=name,
            email=email,
            role=role,
            hashed_password=get_password_hash(password),
        )
        try:
            await self._repository.add(user)
            await self._session.commit()
        except IntegrityError as exc:
            # A concurrent registration won the unique constraint.
            await self._session.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE, param="email") from exc
        await self._repository.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def get_user(self, user_id: str) -> User | None:
        return await self._repository.get(user_id)

    async def require_user(self, user_id: str) -> User:
        """Like ``get_user`` but raises ``NotFoundError`` for unknown ids."""
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    async def list_users(
        self,
        *,
        q: str | None = None,
        sort: UserSort = UserSort.CREATED_AT_DESC,
        page: int = 1,
        limit: int = 30,
    ) -> tuple[list[User], int]:
        """Return the requested page of users matching ``q`` and the total match count."""
        return await self._repository.search(
            q=q,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit,
        )

    async def update_user(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Apply a partial profile update to ``user``."""
        if email is not None and email != user.email:
            if await self._repository.email_taken(email, exclude_id=user.id):
                raise ConflictError(EMAIL_TAKEN_MESSAGE, param="email")
            user.email = email
        if name is not None:
            user.name = name
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError(EMAIL_TAKEN_MESSAGE, param="email") from exc
        await self._repository.refresh(user)
        logger.info("User updated", extra={"user_id": user.id})
        return user

    async def change_password(self, user: User, password: str) -> User:
        user.hashed_password = get_password_hash(password)
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("Password changed", extra={"user_id": user.id})
        return user

    async def delete_user(self, user: User) -> None:
        user_id = user.id
        await self._repository.delete(user)
        await self._session.commit()
        logger.info("User deleted", extra={"user_id": user_id})
