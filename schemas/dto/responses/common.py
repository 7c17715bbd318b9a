"""
Common response DTOs shared across multiple endpoints.

ErrorResponse  — standard error shape from AppError.to_dict(), documented on
                 every router through error_responses()
HealthResponse — GET /health
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the exception handlers."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None
    path: Optional[str] = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, str]


def error_responses(*status_codes: int) -> dict[int, dict]:
    """OpenAPI ``responses=`` entries documenting ErrorResponse bodies."""
    return {code: {"model": ErrorResponse} for code in status_codes}
