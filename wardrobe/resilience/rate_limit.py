"""Token bucket rate limiting for inbound requests.

Each client key gets its own bucket. Buckets refill continuously at
``requests_per_minute / 60`` tokens per second up to ``burst`` tokens.

Usage:
    limiter = RateLimiter(requests_per_minute=120, burst=30)

    if not limiter.try_acquire(client_key):
        return too_many_requests()
"""

import time
from typing import Callable, Optional

from wardrobe.logging import get_logger

logger = get_logger(__name__)

# Idle buckets are dropped once this many keys are tracked
MAX_TRACKED_KEYS = 10_000


class TokenBucket:
    """Token bucket rate limiter.

    Allows bursting up to bucket capacity, then enforces rate limit.
    """

    def __init__(
        self,
        capacity: int,
        refill_rate: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize token bucket.

        Args:
            capacity: Maximum tokens in bucket
            refill_rate: Tokens added per second
            clock: Monotonic time source
        """
        self.capacity = capacity
        self.refill_rate = refill_rate
        self._clock = clock
        self.tokens = float(capacity)
        self.last_refill = clock()

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take tokens if available. Never waits."""
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def retry_after(self, tokens: int = 1) -> float:
        """Seconds until ``tokens`` would be available."""
        self._refill()
        missing = tokens - self.tokens
        if missing <= 0:
            return 0.0
        return missing / self.refill_rate

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = self._clock()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now


class RateLimiter:
    """Per-key request rate limiter."""

    def __init__(
        self,
        requests_per_minute: int,
        burst: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.requests_per_minute = requests_per_minute
        self.burst = burst if burst and burst > 0 else requests_per_minute
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}

    def _bucket(self, key: str) -> TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            if len(self._buckets) >= MAX_TRACKED_KEYS:
                self._evict_full()
            bucket = TokenBucket(
                capacity=self.burst,
                refill_rate=self.requests_per_minute / 60.0,
                clock=self._clock,
            )
            self._buckets[key] = bucket
        return bucket

    def try_acquire(self, key: str) -> bool:
        allowed = self._bucket(key).try_acquire()
        if not allowed:
            logger.info("rate_limited", client=key)
        return allowed

    def retry_after(self, key: str) -> float:
        return self._bucket(key).retry_after()

    def _evict_full(self) -> None:
        """Drop buckets that have refilled completely; they hold no state."""
        for key in [k for k, b in self._buckets.items() if b.retry_after(b.capacity) == 0]:
            del self._buckets[key]
