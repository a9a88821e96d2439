from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from itertools import count

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from userhub.core.config import Settings
from userhub.core.security import create_access_token
from userhub.db.base import metadata
from userhub.deps import get_db_session
from userhub.main import create_app
from userhub.models import User, UserRole
from userhub.services import UserService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "123456"


@dataclass(slots=True)
class SeededUser:
    user: User
    password: str
    token: str

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def basic_auth(self) -> tuple[str, str]:
        return self.user.email, self.password

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(slots=True)
class SeededUsers:
    user1: SeededUser
    user2: SeededUser
    admin: SeededUser


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url=TEST_DATABASE_URL,
        jwt_secret_key="test-secret",
        password_hash_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(settings: Settings, session: AsyncSession) -> AsyncIterator[FastAPI]:
    application = create_app(settings)

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def create_user(
    session: AsyncSession,
    settings: Settings,
) -> Callable[..., Awaitable[SeededUser]]:
    service = UserService(session)
    counter = count()

    async def _factory(
        *,
        name: str = "user",
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.USER,
    ) -> SeededUser:
        user = await service.create_user(
            name=name,
            email=email or f"user-{next(counter)}@example.com",
            password=password,
            role=role,
        )
        token = create_access_token(subject=user.id, role=user.role.value, settings=settings)
        return SeededUser(user=user, password=password, token=token.token)

    return _factory


@pytest_asyncio.fixture
async def users(create_user: Callable[..., Awaitable[SeededUser]]) -> SeededUsers:
    return SeededUsers(
        user1=await create_user(name="user", email="a@a.com"),
        user2=await create_user(name="user", email="b@b.com"),
        admin=await create_user(name="admin", email="c@c.com", role=UserRole.ADMIN),
    )
