from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from userhub.core.config import Settings
from userhub.core.logging import RequestContextFilter
from userhub.errors import ApplicationError, param_from_errors
from userhub.main import create_app

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


def _client(app: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


async def test_application_error_response_schema(app: FastAPI) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            param="widget",
            details={"foo": "bar"},
        )

    async with _client(app) as client:
        response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    payload = response.json()
    request_id = response.headers["X-Request-ID"]
    assert payload == {
        "code": "example_error",
        "message": "Example failure",
        "param": "widget",
        "details": {"foo": "bar", "request_id": request_id},
    }


class ExamplePayload(BaseModel):
    name: str


async def test_validation_error_names_offending_param(app: FastAPI) -> None:
    @app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    async with _client(app) as client:
        response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    request_id = response.headers["X-Request-ID"]
    assert payload["code"] == "bad_request"
    assert payload["param"] == "name"
    assert payload["details"]["errors"][0]["loc"] == ["body", "name"]
    assert payload["details"]["request_id"] == request_id


async def test_not_found_error_response_schema(app: FastAPI) -> None:
    async with _client(app) as client:
        response = await client.get("/error/not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    request_id = response.headers["X-Request-ID"]
    assert payload["code"] == "not_found"
    assert payload["message"]
    assert "param" not in payload
    assert payload["details"]["request_id"] == request_id


async def test_integrity_error_response_schema(app: FastAPI) -> None:
    @app.get("/error/database")
    async def trigger_integrity_error() -> None:  # pragma: no cover - defined in test
        raise IntegrityError("statement", {}, Exception("constraint"))

    async with _client(app) as client:
        response = await client.get("/error/database")

    assert response.status_code == status.HTTP_409_CONFLICT
    payload = response.json()
    request_id = response.headers["X-Request-ID"]
    assert payload["code"] == "conflict"
    assert payload["message"] == "Database integrity violation."
    assert payload["details"]["request_id"] == request_id


async def test_unhandled_error_hides_internal_details(app: FastAPI) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    async with _client(app) as client:
        response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    payload = response.json()
    assert payload["code"] == "server_error"
    assert payload["message"] == "Internal server error."
    assert "Sensitive" not in response.text


async def test_incoming_request_id_is_echoed(app: FastAPI) -> None:
    async with _client(app) as client:
        response = await client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["X-Request-ID"] == "req-123"


def test_param_from_errors_skips_bare_body_location() -> None:
    assert param_from_errors([{"loc": ("body",)}, {"loc": ("query", "limit", 0)}]) == "limit"
    assert param_from_errors([{"loc": ("body",)}]) is None


class _InMemoryHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_request_id_attached_to_logs(app: FastAPI) -> None:
    logger = logging.getLogger("tests.error_handling")
    handler = _InMemoryHandler()
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    @app.get("/log")
    async def emit_log() -> dict[str, str]:  # pragma: no cover - defined in test
        logger.info("Log entry")
        return {"status": "ok"}

    try:
        async with _client(app) as client:
            response = await client.get("/log")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    request_id = response.headers["X-Request-ID"]
    matching = [record for record in handler.records if record.getMessage() == "Log entry"]
    assert matching
    assert getattr(matching[0], "request_id", None) == request_id
