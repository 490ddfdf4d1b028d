"""
Request-window rate limiter for the Lodgify API.

The limiter counts requests inside a single window that restarts at "now"
once it has expired. This is a resetting fixed window rather than a
continuously sliding log, so a burst straddling a window boundary can admit
up to twice the configured limit.

State is not guarded by a lock: it is meant to be shared by coroutines on a
single event loop. Callers running requests from several threads must wrap
``check_limit``/``record_request`` in a mutex, because window rollover is a
check-then-act sequence.
"""

import time
from collections.abc import Callable
from typing import Any

LODGIFY_RATE_LIMIT = 60
LODGIFY_RATE_WINDOW_MS = 60_000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SlidingWindowRateLimiter:
    """Track request counts within a resetting time window."""

    def __init__(
        self,
        limit: int,
        window_ms: int,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            limit: Maximum requests per window
            window_ms: Window length in milliseconds
            clock: Millisecond clock, defaults to a monotonic clock
        """
        self.limit = limit
        self.window_ms = window_ms
        self._clock = clock or _monotonic_ms
        self._count = 0
        self._window_start = self._clock()

    @property
    def count(self) -> int:
        return self._count

    def _roll_window(self) -> None:
        now = self._clock()
        if now - self._window_start >= self.window_ms:
            self._count = 0
            self._window_start = now

    def check_limit(self) -> bool:
        """Return True if another request fits in the current window."""
        self._roll_window()
        return self._count < self.limit

    def record_request(self) -> None:
        """Count a request against the current window."""
        self._roll_window()
        self._count += 1

    def get_remaining(self) -> int:
        self._roll_window()
        return max(0, self.limit - self._count)

    def get_reset_time(self) -> int:
        """Milliseconds until the current window ends."""
        window_end = self._window_start + self.window_ms
        return max(0, int(window_end - self._clock()))

    def reset(self) -> None:
        self._count = 0
        self._window_start = self._clock()

    def get_status(self) -> dict[str, Any]:
        """Get current rate limiter status."""
        self._roll_window()
        return {
            "allowed": self._count < self.limit,
            "remaining": self.get_remaining(),
            "reset_time_ms": self.get_reset_time(),
            "limit": self.limit,
            "window_ms": self.window_ms,
        }


def create_lodgify_rate_limiter(
    limit: int = LODGIFY_RATE_LIMIT,
    window_ms: int = LODGIFY_RATE_WINDOW_MS,
    clock: Callable[[], float] | None = None,
) -> SlidingWindowRateLimiter:
    """Create a limiter with Lodgify's documented quota (60 requests/minute)."""
    return SlidingWindowRateLimiter(limit=limit, window_ms=window_ms, clock=clock)
