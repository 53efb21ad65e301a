"""Resilience helpers: completion fallback chain and request rate limiting."""

from wardrobe.resilience.fallback import (
    FallbackChain,
    FallbackExhaustedError,
    FallbackResult,
)
from wardrobe.resilience.rate_limit import (
    RateLimiter,
    TokenBucket,
)

__all__ = [
    "FallbackChain",
    "FallbackExhaustedError",
    "FallbackResult",
    "RateLimiter",
    "TokenBucket",
]
