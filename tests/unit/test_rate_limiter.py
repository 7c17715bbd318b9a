"""Unit tests for services.rate_limiter."""

import pytest

from config import RateLimitSettings
from errors import RateLimitError
from services import rate_limiter
from services.rate_limiter import RateLimiter, RateLimitStatus, async_storage_uri


class TestDisabled:
    @pytest.mark.parametrize(
        "requests, duration",
        [(0, 60), (10, 0), (0, 0)],
        ids=["zero_requests", "zero_duration", "both_zero"],
    )
    async def test_never_limits(self, requests, duration):
        limiter = RateLimiter(requests, duration)
        assert limiter.enabled is False
        for _ in range(100):
            assert await limiter.hit("1.2.3.4", rate_limiter.CREATE) is None

    async def test_storage_check_passes(self):
        assert await RateLimiter(0, 0).check_storage() is True


class TestFixedWindow:
    async def test_admits_n_then_rejects(self):
        limiter = RateLimiter(2, 60)
        first = await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        second = await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        assert first.remaining == 1
        assert second.remaining == 0
        with pytest.raises(RateLimitError) as exc_info:
            await limiter.hit("1.2.3.4", rate_limiter.CREATE)

        headers = exc_info.value.headers
        assert headers["X-RateLimit-Limit"] == "2"
        assert headers["X-RateLimit-Remaining"] == "0"
        assert int(headers["Retry-After"]) >= 1

    async def test_buckets_are_per_category(self):
        limiter = RateLimiter(1, 60)
        await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        await limiter.hit("1.2.3.4", rate_limiter.UPDATE)
        await limiter.hit("1.2.3.4", rate_limiter.DELETE)
        with pytest.raises(RateLimitError):
            await limiter.hit("1.2.3.4", rate_limiter.CREATE)

    async def test_buckets_are_per_client(self):
        limiter = RateLimiter(1, 60)
        await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        assert await limiter.hit("5.6.7.8", rate_limiter.CREATE) is not None

    async def test_window_elapse_resets(self, monkeypatch, manual_time):
        monkeypatch.setattr("time.time", manual_time)
        limiter = RateLimiter(2, 60)
        await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        with pytest.raises(RateLimitError) as exc_info:
            await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        assert exc_info.value.headers["Retry-After"] == "60"

        manual_time.advance(61)
        status = await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        assert status is not None
        assert status.remaining == 1

    async def test_storage_check_on_memory(self):
        assert await RateLimiter(1, 60).check_storage() is True

    async def test_reset_clears_counters(self):
        limiter = RateLimiter(1, 60)
        await limiter.hit("1.2.3.4", rate_limiter.CREATE)
        await limiter.reset()
        assert await limiter.hit("1.2.3.4", rate_limiter.CREATE) is not None

    def test_from_settings(self):
        limiter = RateLimiter.from_settings(
            RateLimitSettings(rate_limit_requests=5, rate_limit_duration_seconds=30)
        )
        assert limiter.enabled is True
        assert limiter.requests == 5
        assert limiter.duration_seconds == 30


class TestAsyncStorageUri:
    @pytest.mark.parametrize(
        "uri, expected",
        [
            ("memory://", "async+memory://"),
            ("redis://cache:6379", "async+redis://cache:6379"),
            ("async+memory://", "async+memory://"),
        ],
        ids=["memory", "redis", "already_async"],
    )
    def test_maps_to_async_variant(self, uri, expected):
        assert async_storage_uri(uri) == expected


class TestRateLimitStatus:
    def test_headers(self):
        status = RateLimitStatus(limit=10, remaining=3, reset_at=1700000060)
        assert status.headers() == {
            "X-RateLimit-Limit": "10",
            "X-RateLimit-Remaining": "3",
            "X-RateLimit-Reset": "1700000060",
        }

    @pytest.mark.parametrize(
        "now, expected",
        [(1700000000, 60), (1700000059.5, 1), (1700000100, 1)],
        ids=["full_window", "almost_over", "already_over"],
    )
    def test_retry_after(self, now, expected):
        status = RateLimitStatus(limit=10, remaining=0, reset_at=1700000060)
        assert status.retry_after(now) == expected
