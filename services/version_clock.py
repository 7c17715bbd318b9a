"""
Version stamps for document writes.

A version is the Unix time (seconds) at which the row was written. Two
writes to the same document inside one second would collide, so callers
that know the document's current latest version pass it as ``floor`` and
get ``floor + 1`` when the wall clock has not moved past it yet.
"""

from __future__ import annotations

import time
from typing import Callable, Optional


class VersionClock:
    def __init__(self, time_func: Callable[[], float] = time.time) -> None:
        self._time_func = time_func

    def now(self) -> int:
        return int(self._time_func())

    def next_version(self, floor: Optional[int] = None) -> int:
        """Return the version stamp for a new row.

        Args:
            floor: Latest existing version of the document, if any.

        Returns:
            Current Unix time, or ``floor + 1`` when that is later. Always > 0.
        """
        version = max(self.now(), 1)
        if floor is not None and version <= floor:
            version = floor + 1
        return version
