"""
Fixed-window rate limiting for mutating endpoints.

Built on the ``limits`` package (the engine behind flask-limiter). One
bucket per (client key, endpoint category); a bucket admits N requests per
W-second window. Counters live in the configured ``limits`` async
storage, in-process memory by default or Redis when shared across
workers, so counting never blocks the event loop. The storage performs
the increment-and-compare atomically.

The limiter is a no-op when either N or W is zero.
"""

from __future__ import annotations

import time
import urllib.parse
from dataclasses import dataclass
from typing import Optional

from limits import RateLimitItemPerSecond
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from config import RateLimitSettings
from errors import RateLimitError
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

# Endpoint categories; reads have none because they are never limited
CREATE = "create"
UPDATE = "update"
DELETE = "delete"
DELETE_VERSION = "delete_version"
SHARE = "share"


@dataclass(frozen=True)
class RateLimitStatus:
    limit: int
    remaining: int
    reset_at: int  # Unix timestamp the current window ends at

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }

    def retry_after(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(1, int(self.reset_at - now))


def async_storage_uri(storage_uri: str) -> str:
    """Map a ``limits`` storage URI to its asyncio variant (``async+<scheme>``)."""
    if storage_uri.startswith("async+"):
        return storage_uri
    return f"async+{storage_uri}"


def _storage_options(storage_uri: str) -> dict[str, str]:
    # Redis counters go through redis-py's asyncio client, already a dependency
    scheme = urllib.parse.urlparse(storage_uri).scheme
    if "redis" in scheme:
        return {"implementation": "redispy"}
    return {}


class RateLimiter:
    def __init__(
        self,
        requests: int,
        duration_seconds: int,
        storage_uri: str = "memory://",
    ) -> None:
        self.requests = requests
        self.duration_seconds = duration_seconds
        self._item = None
        self._storage = None
        self._strategy = None
        if self.enabled:
            uri = async_storage_uri(storage_uri)
            self._item = RateLimitItemPerSecond(requests, duration_seconds)
            self._storage = storage_from_string(uri, **_storage_options(uri))
            self._strategy = FixedWindowRateLimiter(self._storage)

    @classmethod
    def from_settings(cls, settings: RateLimitSettings) -> "RateLimiter":
        return cls(
            settings.rate_limit_requests,
            settings.rate_limit_duration_seconds,
            settings.rate_limit_storage_uri,
        )

    @property
    def enabled(self) -> bool:
        return self.requests > 0 and self.duration_seconds > 0

    async def hit(self, client_key: str, category: str) -> Optional[RateLimitStatus]:
        """Count one request against the (client_key, category) bucket.

        Returns:
            The bucket status after counting, or None when limiting is off.

        Raises:
            RateLimitError: the bucket was already full for this window.
        """
        if not self.enabled:
            return None

        allowed = await self._strategy.hit(self._item, client_key, category)
        stats = await self._strategy.get_window_stats(self._item, client_key, category)
        status = RateLimitStatus(
            limit=self.requests,
            remaining=stats.remaining,
            reset_at=int(stats.reset_time),
        )
        if allowed:
            return status

        log.warning(
            "rate_limit_exceeded",
            client=hash_ip(client_key),
            category=category,
            limit=self.requests,
            window_seconds=self.duration_seconds,
        )
        headers = status.headers()
        headers["Retry-After"] = str(status.retry_after())
        raise RateLimitError(
            f"rate limit exceeded: {self.requests} per {self.duration_seconds} seconds",
            details={"retry_after": status.retry_after()},
            headers=headers,
        )

    async def check_storage(self) -> bool:
        """Return True if the counter storage is reachable (always True when off)."""
        if self._storage is None:
            return True
        return bool(await self._storage.check())

    async def reset(self) -> None:
        if self._storage is not None:
            await self._storage.reset()
