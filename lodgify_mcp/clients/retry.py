"""
Exponential backoff retry for async API operations.

Delays are expressed in milliseconds. A server supplied ``Retry-After`` value
takes precedence over the computed backoff, and both are capped at
``max_delay_ms``.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from lodgify_mcp.utils.exceptions import ApiError, LodgifyError

logger = logging.getLogger(__name__)

SleepFunction = Callable[[float], Awaitable[None]]
RetryPredicate = Callable[[int, int], bool]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class RetryContext:
    """Per-attempt context handed to the retried operation."""

    attempt: int
    total_attempts: int
    last_error: BaseException | None = None


@dataclass(frozen=True)
class RetryResult:
    """Outcome of a retried operation, tagged by ``success``."""

    success: bool
    attempts: int
    data: Any = None
    error: BaseException | None = None


def default_should_retry(status: int, attempt: int) -> bool:
    """Retry on 429, 5xx and network failures (status 0)."""
    if status == 429:
        return True
    if 500 <= status < 600:
        return True
    if 400 <= status < 500:
        return False
    return status == 0


def parse_retry_after(value: str | None) -> int | None:
    """Parse the leading integer of a Retry-After value, in seconds."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    return int(match.group(1))


def status_from_error(error: BaseException) -> int:
    """HTTP status carried by an error; 0 for network or unknown failures."""
    if isinstance(error, LodgifyError):
        return error.status
    return 0


def is_retryable_error(error: BaseException) -> bool:
    """
    Whether ``error`` may be handed to the retry predicate at all.

    API errors and OS level network failures qualify. Local client errors
    (read-only, rate limit, validation) and programming errors such as a
    ``TypeError`` fail on the first attempt.
    """
    if isinstance(error, ApiError):
        return True
    if isinstance(error, LodgifyError):
        return False
    return isinstance(error, OSError)


async def _sleep_ms(delay_ms: float) -> None:
    await asyncio.sleep(delay_ms / 1000)


class ExponentialBackoffRetry:
    """Retry an async operation with exponential backoff."""

    def __init__(
        self,
        max_retries: int = 5,
        initial_delay_ms: float = 1000,
        backoff_multiplier: float = 2,
        max_delay_ms: float = 30_000,
        should_retry: RetryPredicate | None = None,
        sleep: SleepFunction | None = None,
    ) -> None:
        """
        Initialize retry policy.

        Args:
            max_retries: Total number of attempts (at least 1)
            initial_delay_ms: Delay before the second attempt
            backoff_multiplier: Factor applied per attempt
            max_delay_ms: Upper bound for any single delay
            should_retry: Predicate ``(status, attempt_index) -> bool``
            sleep: Async sleep receiving milliseconds, injectable for tests
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.backoff_multiplier = backoff_multiplier
        self.max_delay_ms = max_delay_ms
        self.should_retry = should_retry or default_should_retry
        self._sleep = sleep or _sleep_ms

    def calculate_delay(self, attempt: int, retry_after: str | None = None) -> float:
        """Delay in milliseconds after the failed attempt with index ``attempt``."""
        retry_after_seconds = parse_retry_after(retry_after)
        if retry_after_seconds is not None:
            return max(0, min(retry_after_seconds * 1000, self.max_delay_ms))

        delay = self.initial_delay_ms * self.backoff_multiplier**attempt
        return min(delay, self.max_delay_ms)

    async def execute(
        self,
        operation: Callable[[RetryContext], Awaitable[Any]],
        get_retry_after: Callable[[BaseException], str | None] | None = None,
    ) -> RetryResult:
        """Run ``operation`` until it succeeds, fails permanently or attempts run out."""
        last_error: BaseException | None = None

        for attempt in range(self.max_retries):
            context = RetryContext(
                attempt=attempt + 1,
                total_attempts=self.max_retries,
                last_error=last_error,
            )

            try:
                data = await operation(context)
                return RetryResult(success=True, data=data, attempts=attempt + 1)
            except Exception as e:
                last_error = e

                status = status_from_error(e)
                if not is_retryable_error(e) or not self.should_retry(
                    status, attempt
                ):
                    return RetryResult(success=False, error=e, attempts=attempt + 1)

                if attempt < self.max_retries - 1:
                    retry_after = get_retry_after(e) if get_retry_after else None
                    delay = self.calculate_delay(attempt, retry_after)
                    logger.debug(
                        f"Attempt {attempt + 1} failed with status {status}, "
                        f"retrying in {delay}ms",
                        extra={
                            "attempt": attempt + 1,
                            "status_code": status,
                            "delay_ms": delay,
                        },
                    )
                    await self._sleep(delay)

        return RetryResult(success=False, error=last_error, attempts=self.max_retries)

    async def execute_or_throw(
        self,
        operation: Callable[[RetryContext], Awaitable[Any]],
        get_retry_after: Callable[[BaseException], str | None] | None = None,
    ) -> Any:
        """Like ``execute`` but raise the final error instead of returning it."""
        result = await self.execute(operation, get_retry_after)
        if not result.success:
            raise result.error
        return result.data
