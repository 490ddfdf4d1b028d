"""
Unit tests for SlidingWindowRateLimiter.
"""

from lodgify_mcp.clients.rate_limiter import (
    LODGIFY_RATE_LIMIT,
    LODGIFY_RATE_WINDOW_MS,
    SlidingWindowRateLimiter,
    create_lodgify_rate_limiter,
)


class TestSlidingWindowRateLimiter:
    """Test suite for the request-window rate limiter."""

    def test_allows_up_to_limit_then_blocks(self, clock):
        limiter = SlidingWindowRateLimiter(limit=3, window_ms=1000, clock=clock)

        for _ in range(3):
            assert limiter.check_limit() is True
            limiter.record_request()

        assert limiter.check_limit() is False
        assert limiter.get_remaining() == 0

    def test_check_limit_does_not_count(self, clock):
        limiter = SlidingWindowRateLimiter(limit=1, window_ms=1000, clock=clock)

        for _ in range(5):
            assert limiter.check_limit() is True

        assert limiter.count == 0

    def test_window_rollover_restores_capacity(self, clock):
        limiter = SlidingWindowRateLimiter(limit=2, window_ms=1000, clock=clock)
        limiter.record_request()
        limiter.record_request()
        assert limiter.check_limit() is False

        clock.advance(1000)

        assert limiter.check_limit() is True
        assert limiter.get_remaining() == 2

    def test_window_restarts_at_now_not_at_boundary(self, clock):
        limiter = SlidingWindowRateLimiter(limit=1, window_ms=1000, clock=clock)
        limiter.record_request()

        clock.advance(1500)
        limiter.record_request()

        # New window began at the rollover instant, 1000ms from now
        assert limiter.get_reset_time() == 1000

    def test_boundary_burst_admits_twice_the_limit(self, clock):
        limiter = SlidingWindowRateLimiter(limit=2, window_ms=1000, clock=clock)
        admitted = 0

        clock.advance(999)
        while limiter.check_limit():
            limiter.record_request()
            admitted += 1

        clock.advance(1)
        while limiter.check_limit():
            limiter.record_request()
            admitted += 1

        assert admitted == 4

    def test_reset_time_counts_down_and_floors_at_zero(self, clock):
        limiter = SlidingWindowRateLimiter(limit=5, window_ms=1000, clock=clock)

        assert limiter.get_reset_time() == 1000
        clock.advance(400)
        assert limiter.get_reset_time() == 600
        clock.advance(5000)
        assert limiter.get_reset_time() == 0

    def test_reset_restores_full_limit(self, clock):
        limiter = SlidingWindowRateLimiter(limit=10, window_ms=1000, clock=clock)
        for _ in range(7):
            limiter.record_request()

        limiter.reset()

        assert limiter.get_remaining() == 10
        assert limiter.check_limit() is True

    def test_remaining_never_negative(self, clock):
        limiter = SlidingWindowRateLimiter(limit=1, window_ms=1000, clock=clock)
        limiter.record_request()
        limiter.record_request()

        assert limiter.get_remaining() == 0

    def test_get_status(self, clock):
        limiter = SlidingWindowRateLimiter(limit=2, window_ms=1000, clock=clock)
        limiter.record_request()

        status = limiter.get_status()

        assert status == {
            "allowed": True,
            "remaining": 1,
            "reset_time_ms": 1000,
            "limit": 2,
            "window_ms": 1000,
        }

    def test_lodgify_defaults(self):
        limiter = create_lodgify_rate_limiter()

        assert limiter.limit == LODGIFY_RATE_LIMIT == 60
        assert limiter.window_ms == LODGIFY_RATE_WINDOW_MS == 60_000
