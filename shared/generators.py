"""
Random identifier generators — pure, side-effect-free functions.

All generators use the ``secrets`` module; document IDs are the only
thing standing between a reader and a document, so they must not be
predictable.
"""

from __future__ import annotations

import secrets
import string

DOCUMENT_ID_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
DOCUMENT_ID_LENGTH = 8


def generate_document_id(length: int = DOCUMENT_ID_LENGTH) -> str:
    """Generate an alphanumeric document ID.

    Args:
        length: Number of characters (default 8).

    Returns:
        Random alphanumeric string of the requested length.
    """
    return "".join(secrets.choice(DOCUMENT_ID_ALPHABET) for _ in range(length))


def generate_request_id() -> str:
    """Generate a request ID for log correlation, e.g. ``req_1f2e3d4c5b6a``."""
    return f"req_{secrets.token_hex(6)}"
