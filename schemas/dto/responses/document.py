"""
Response DTOs for document endpoints.

DocumentResponse — create / update / get (200)
VersionResponse  — one element of GET /documents/{id}/versions
ShareResponse    — POST /documents/{id}/share
DeleteResponse   — DELETE /documents/{id}/versions/{version}

Optional fields are omitted from the JSON when unset (routes use
``response_model_exclude_none``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class DocumentResponse(BaseModel):
    """A single document version, optionally rendered.

    ``token`` is only present on create: it carries every permission on the
    new document and is the only time the server hands one out unasked.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str
    version: int  # Unix timestamp
    version_label: Optional[str] = None
    version_time: Optional[str] = None
    data: Optional[str] = None
    formatted: Optional[str] = None
    css: Optional[str] = None
    language: str
    token: Optional[str] = None


class VersionResponse(BaseModel):
    """One version in a document's history; ``data`` only with ``withData=true``."""

    model_config = ConfigDict(populate_by_name=True)

    version: int
    data: Optional[str] = None
    language: str


class ShareResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str


class DeleteResponse(BaseModel):
    """Remaining version count after deleting one version; 0 means the document is gone."""

    model_config = ConfigDict(populate_by_name=True)

    versions: int
