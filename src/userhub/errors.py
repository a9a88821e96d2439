"""Error taxonomy and the handlers that render it as JSON."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping, Sequence

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Could not validate credentials."


class ApplicationError(Exception):
    """Base class for errors surfaced to API clients."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        param: str | None = None,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.param = param
        self.details = details
        self.headers = dict(headers) if headers else None


class BadRequestError(ApplicationError):
    """A submitted field is missing or malformed; ``param`` names it."""

    def __init__(self, message: str, *, param: str | None = None, details: Any | None = None) -> None:
        super().__init__(
            message,
            code="bad_request",
            status_code=status.HTTP_400_BAD_REQUEST,
            param=param,
            details=details,
        )


class UnauthorizedError(ApplicationError):
    def __init__(self, message: str = UNAUTHORIZED_MESSAGE, *, scheme: str = "Bearer") -> None:
        super().__init__(
            message,
            code="unauthorized",
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": scheme},
        )


class NotFoundError(ApplicationError):
    def __init__(self, message: str = "Resource not found.") -> None:
        super().__init__(message, code="not_found", status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(ApplicationError):
    """A unique field collides with an existing record."""

    def __init__(self, message: str, *, param: str | None = None) -> None:
        super().__init__(
            message,
            code="conflict",
            status_code=status.HTTP_409_CONFLICT,
            param=param,
        )


_HTTP_STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def param_from_errors(errors: Sequence[Mapping[str, Any]]) -> str | None:
    """Name of the first request field that failed validation.

    Locations look like ``("body", "email")`` or ``("query", "limit")``; a
    bare ``("body",)`` means the body itself was missing or not an object.
    """
    for error in errors:
        loc = [part for part in error.get("loc", ()) if isinstance(part, str)]
        if len(loc) > 1:
            return loc[1]
    return None


def _details_with_request_id(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {**details, "request_id": request_id}
    return {"detail": details, "request_id": request_id}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    param: str | None = None,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        code=code,
        message=message,
        param=param,
        details=_details_with_request_id(request, details),
    )
    response = JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", exclude_none=True),
        headers=dict(headers) if headers else None,
    )
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    """Attach JSON error handlers to ``app``."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
        log(
            "Request rejected: %s",
            exc.message,
            extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            param=exc.param,
            details=exc.details,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = exc.errors()
        param = param_from_errors(errors)
        logger.warning("Request validation failed", extra={"param": param, "path": request.url.path})
        message = f"Invalid value for '{param}'." if param else "Request validation failed."
        return _error_response(
            request,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="bad_request",
            message=message,
            param=param,
            details={"errors": [_summarise(error) for error in errors]},
        )

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.error("Database integrity error", exc_info=exc)
        return _error_response(
            request,
            status_code=status.HTTP_409_CONFLICT,
            code="conflict",
            message="Database integrity violation.",
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_STATUS_CODES.get(exc.status_code, "http_error")
        if isinstance(exc.detail, str):
            message = exc.detail
        else:
            message = HTTPStatus(exc.status_code).phrase
        logger.warning(
            "HTTP exception raised",
            extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            code=code,
            message=message,
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled application error.")
        return _error_response(
            request,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="server_error",
            message="Internal server error.",
        )


def _summarise(error: Mapping[str, Any]) -> dict[str, Any]:
    # ``ctx`` may hold exception instances that are not JSON serialisable.
    return {
        "loc": list(error.get("loc", ())),
        "msg": error.get("msg", ""),
        "type": error.get("type", ""),
    }


__all__ = [
    "ApplicationError",
    "BadRequestError",
    "ConflictError",
    "NotFoundError",
    "UNAUTHORIZED_MESSAGE",
    "UnauthorizedError",
    "param_from_errors",
    "register_exception_handlers",
]
