"""Service-level response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    """Metadata payload returned by the root endpoint."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(BaseModel):
    status: str = Field(default="ok", description="Service health indicator")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    code: str = Field(description="Machine-readable error category")
    message: str = Field(description="Human-readable explanation")
    param: str | None = Field(
        default=None,
        description="Request field that caused the failure, when one did",
    )
    details: Any | None = Field(default=None, description="Extra context, including the request id")


__all__ = ["ErrorResponse", "HealthCheckResponse", "RootResponse"]
