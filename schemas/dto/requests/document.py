"""
Request DTOs for document endpoints.

Document bodies themselves are raw text (not JSON) and the language comes
from the ``Language`` header, so only the share body and the query strings
are modelled here.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ShareRequest(BaseModel):
    """Request body for POST /documents/{document_id}/share.

    Permission names are kept as plain strings so that empty and unknown
    values get the share-specific error messages instead of a generic
    schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    permissions: list[str] = Field(default_factory=list)


class RenderQuery(BaseModel):
    """Query parameters controlling optional syntax-highlighted output.

    ``render`` names a formatter (``html``, ``terminal256``, ...). When it is
    absent no rendering happens. ``language`` overrides the stored language
    for rendering only; ``style`` overrides the ``style`` cookie.
    """

    model_config = ConfigDict(populate_by_name=True)

    render: Optional[str] = None
    language: Optional[str] = None
    style: Optional[str] = None


class VersionsQuery(BaseModel):
    """Query parameters for GET /documents/{document_id}/versions."""

    model_config = ConfigDict(populate_by_name=True)

    with_data: bool = Field(default=False, alias="withData")
