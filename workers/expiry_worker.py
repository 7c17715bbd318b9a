"""
Background task removing expired document versions.

Runs inside the API process (started from the app lifespan) when
EXPIRE_AFTER_SECONDS is set. A failed sweep, whatever the error, is
logged and retried on the next interval; the loop only stops when the
task is cancelled.
"""

from __future__ import annotations

import asyncio

from errors import StorageError
from services.document_service import DocumentService
from shared.logging import get_logger

log = get_logger(__name__)


async def run_expiry_cleanup(
    service: DocumentService, expire_after_seconds: int, interval_seconds: int
) -> None:
    log.info(
        "expiry_cleanup_started",
        expire_after_seconds=expire_after_seconds,
        interval_seconds=interval_seconds,
    )
    while True:
        try:
            await service.remove_expired(expire_after_seconds)
        except StorageError as e:
            log.error("expiry_cleanup_failed", error=e.message)
        except Exception:
            log.exception("expiry_cleanup_failed")
        await asyncio.sleep(interval_seconds)
