"""
Shared test fixtures.

The storage fixtures use mongomock-motor, an in-memory stand-in for the
async MongoDB driver, so no test needs a running database. Time is
controlled through ``ManualTime`` so version stamps are deterministic.
"""

from __future__ import annotations

import pytest
from mongomock_motor import AsyncMongoMockClient

from repositories.document_repository import DocumentRepository
from services.document_service import DocumentService
from services.rate_limiter import RateLimiter
from services.token_service import TokenService
from services.version_clock import VersionClock

TEST_SECRET = "test-signing-secret"
START_TIME = 1_700_000_000


class ManualTime:
    """Callable clock for tests; only moves when told to."""

    def __init__(self, start: float = START_TIME) -> None:
        self.value = float(start)

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def manual_time() -> ManualTime:
    return ManualTime()


@pytest.fixture
def clock(manual_time) -> VersionClock:
    return VersionClock(manual_time)


@pytest.fixture
def collection():
    return AsyncMongoMockClient()["gobin"]["documents"]


@pytest.fixture
async def repository(collection, clock) -> DocumentRepository:
    repo = DocumentRepository(collection, clock=clock)
    await repo.ensure_indexes()
    return repo


@pytest.fixture
def tokens(manual_time) -> TokenService:
    return TokenService(TEST_SECRET, time_func=manual_time)


@pytest.fixture
def limiter() -> RateLimiter:
    # N = 0 turns limiting off; rate-limit tests build their own
    return RateLimiter(0, 0)


@pytest.fixture
def service(repository, tokens, limiter, clock) -> DocumentService:
    return DocumentService(repository, tokens, limiter, clock=clock)
