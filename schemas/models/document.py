"""
Document version model.

Maps to the `documents` MongoDB collection. Each row is one immutable
version of a document; the unique index on (document_id, version) is the
storage identity. `_id` is a MongoDB ObjectId and doubles as insertion
order when two rows share a version stamp.

`content` is None when a listing was requested without content.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.models.base import StoredRow


class DocumentDoc(StoredRow):
    """One version of a document, as stored in `documents`."""

    document_id: str
    version: int = Field(gt=0)
    content: Optional[str] = None
    language: str
