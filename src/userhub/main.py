"""Entry point for the UserHub FastAPI application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .core.security import configure_password_hashing
from .db.session import create_engine, create_session_factory, init_db
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .schemas.system import RootResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    settings: Settings = application.state.settings
    if settings.auto_create_tables:
        await init_db(application.state.engine)
    logger.info("Service started", extra={"environment": settings.environment})
    try:
        yield
    finally:
        await application.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an application bound to ``settings`` (environment settings by default)."""
    settings = settings or get_settings()
    configure_logging(settings)
    configure_password_hashing(settings.password_hash_rounds)

    router_prefix = settings.router_prefix
    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="User accounts with role-based access control.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{router_prefix}/openapi.json",
        lifespan=_lifespan,
    )

    engine = create_engine(settings)
    application.state.settings = settings
    application.state.engine = engine
    application.state.session_factory = create_session_factory(engine)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    application.add_middleware(CorrelationIdMiddleware)

    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)
    application.add_api_route(
        "/",
        read_root,
        methods=["GET"],
        response_model=RootResponse,
        summary="Service metadata",
    )

    register_exception_handlers(application)
    return application


async def read_root(settings: SettingsDependency) -> RootResponse:
    return RootResponse(
        name=settings.project_name,
        environment=settings.environment,
        version=settings.version,
        api_prefix=settings.router_prefix,
    )


def run() -> None:
    """Console entry point (``userhub``)."""
    settings = get_settings()
    uvicorn.run(
        "userhub.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
