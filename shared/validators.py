"""
Input validators for document requests — framework-agnostic, pure functions.

Validators never raise; the service layer decides which error a failed
check maps to.
"""

from __future__ import annotations

from typing import Optional

# Version 0 means "no specific version requested" at the request boundary
LATEST_VERSION = 0


def parse_version(raw: Optional[str]) -> Optional[int]:
    """Parse a version path segment.

    Returns:
        ``LATEST_VERSION`` when *raw* is empty or ``None``, the integer value
        for a valid non-negative integer, and ``None`` for anything else.
    """
    if raw is None or raw == "":
        return LATEST_VERSION
    try:
        version = int(raw, 10)
    except ValueError:
        return None
    if version < 0:
        return None
    return version


def exceeds_max_document_size(content: str, max_size: int) -> bool:
    """Return True if *content* has more than *max_size* characters.

    Length is counted in characters (code points), not bytes. A *max_size*
    of 0 or less disables the check.
    """
    return max_size > 0 and len(content) > max_size


def is_valid_document_id(document_id: str) -> bool:
    """Return True if *document_id* looks like something we could have issued."""
    return bool(document_id) and len(document_id) <= 64 and document_id.isalnum()
