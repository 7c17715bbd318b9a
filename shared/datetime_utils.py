"""
Version timestamp formatting — framework-agnostic.

Document versions are Unix timestamps (seconds). These helpers turn them
into the human-readable label/time pair returned alongside a new version.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

VERSION_TIME_FORMAT = "%d/%m/%Y %H:%M:%S"

_UNITS: tuple[tuple[str, int], ...] = (
    ("years", 365 * 24 * 3600),
    ("months", 30 * 24 * 3600),
    ("days", 24 * 3600),
    ("hours", 3600),
    ("minutes", 60),
)


def version_to_datetime(version: int) -> datetime:
    """Return the UTC datetime a version stamp was assigned at."""
    return datetime.fromtimestamp(version, tz=timezone.utc)


def format_version(version: int, now: Optional[datetime] = None) -> tuple[str, str]:
    """Format a version stamp as ``(relative label, absolute time)``.

    The label uses the largest whole unit that fits, e.g. ``"3 minutes ago"``;
    anything under a minute is reported in seconds. Future stamps (clock
    skew) are clamped to ``"0 seconds ago"``.

    Args:
        version: Unix timestamp in seconds.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Tuple of label and ``dd/mm/YYYY HH:MM:SS`` string in UTC.
    """
    moment = version_to_datetime(version)
    now = now or datetime.now(timezone.utc)
    elapsed = max(0, int((now - moment).total_seconds()))

    label = f"{elapsed} seconds ago"
    for unit, seconds in _UNITS:
        if elapsed >= seconds:
            label = f"{elapsed // seconds} {unit} ago"
            break
    return label, moment.strftime(VERSION_TIME_FORMAT)
