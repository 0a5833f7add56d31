"""
Throttling between write batches.

Airtable allows 5 requests per second per base. The batch writer calls
`wait()` before every batch except the first; the policy decides how long
that takes. Clock and sleep are injectable so tests never sleep.
"""

from typing import Callable, Protocol
import time
import structlog

from config.settings import Settings

logger = structlog.get_logger(__name__)


class Throttle(Protocol):
    """Anything with a blocking wait()."""

    def wait(self) -> float:
        """Block until the next request may go out; return seconds waited."""
        ...


class NoDelayThrottle:
    """Never waits. For dry runs and tests."""

    def wait(self) -> float:
        return 0.0


class FixedDelayThrottle:
    """Sleep a fixed time between batches (default 250 ms)."""

    def __init__(self, delay_seconds: float = 0.25, sleep: Callable[[float], None] = time.sleep):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def wait(self) -> float:
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)
        return self.delay_seconds


class TokenBucketThrottle:
    """
    Token bucket: `capacity` requests may go out back to back, then one
    per 1/rate seconds.

    Args:
        rate_per_second: Refill rate
        capacity: Bucket size (burst)
        clock: Monotonic clock in seconds
        sleep: Blocking sleep
    """

    def __init__(
        self,
        rate_per_second: float = 5.0,
        capacity: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be > 0")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        self.rate = rate_per_second
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = capacity
        self._last = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._last = now

    def wait(self) -> float:
        self._refill()

        waited = 0.0
        if self._tokens < 1:
            waited = (1 - self._tokens) / self.rate
            self._sleep(waited)
            self._refill()
            # Sleep may return early on some platforms; never go negative
            self._tokens = max(self._tokens, 1.0)

        self._tokens -= 1
        return waited


def build_throttle(settings: Settings) -> Throttle:
    """
    Create the throttle selected by BATCH_THROTTLE.

    fixed → FixedDelayThrottle(BATCH_DELAY_SECONDS)
    token_bucket → TokenBucketThrottle(BATCH_REQUESTS_PER_SECOND)
    none → NoDelayThrottle
    """
    if settings.batch_throttle == "token_bucket":
        throttle: Throttle = TokenBucketThrottle(rate_per_second=settings.batch_requests_per_second)
    elif settings.batch_throttle == "none":
        throttle = NoDelayThrottle()
    else:
        throttle = FixedDelayThrottle(delay_seconds=settings.batch_delay_seconds)

    logger.debug("throttle_selected", policy=settings.batch_throttle)
    return throttle
