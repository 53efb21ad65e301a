"""Fallback chain for completion API shapes.

Tries strategies in order until one succeeds. A strategy failure only moves
on to the next strategy when ``should_fallback`` accepts the error; any
other error propagates immediately.

Usage:
    chain = FallbackChain(
        [("responses", call_responses), ("chat", call_chat)],
        should_fallback=is_capability_error,
    )

    result = await chain.invoke(system, user)
    if result.degraded:
        logger.warning("used_fallback", strategy=result.strategy_used)
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from wardrobe.logging import get_logger

logger = get_logger(__name__)

Strategy = Callable[..., Awaitable[Any]]


@dataclass
class FallbackResult:
    """Result from fallback chain execution."""

    result: Any
    strategy_used: str
    attempts: list[dict] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """Whether a fallback strategy was used."""
        return len(self.attempts) > 1


class FallbackExhaustedError(Exception):
    """Every strategy in the chain failed.

    Attributes:
        errors: (strategy name, exception) pairs in the order they were tried
    """

    def __init__(self, errors: list[tuple[str, Exception]]):
        self.errors = errors
        names = ", ".join(name for name, _ in errors)
        super().__init__(f"All strategies failed: {names}")

    @property
    def first_error(self) -> Exception:
        return self.errors[0][1]

    @property
    def last_error(self) -> Exception:
        return self.errors[-1][1]


class FallbackChain:
    """Ordered list of interchangeable async strategies."""

    def __init__(
        self,
        strategies: list[tuple[str, Strategy]],
        should_fallback: Optional[Callable[[Exception], bool]] = None,
        on_fallback: Optional[Callable[[str, str, Exception], None]] = None,
    ):
        """Initialize fallback chain.

        Args:
            strategies: List of (name, coroutine function) tuples in priority order
            should_fallback: Predicate deciding whether an error moves on to the
                next strategy; defaults to always
            on_fallback: Callback when falling back (from_name, to_name, error)
        """
        if not strategies:
            raise ValueError("At least one strategy required")

        self.strategies = strategies
        self.should_fallback = should_fallback or (lambda e: True)
        self.on_fallback = on_fallback

    async def invoke(self, *args: Any, **kwargs: Any) -> FallbackResult:
        """Invoke the chain, trying strategies in order.

        Raises:
            FallbackExhaustedError: When every attempted strategy failed
            Exception: The first error ``should_fallback`` rejects
        """
        attempts: list[dict] = []
        errors: list[tuple[str, Exception]] = []

        for i, (name, strategy) in enumerate(self.strategies):
            try:
                result = await strategy(*args, **kwargs)
            except Exception as e:
                attempts.append({
                    "strategy": name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "success": False,
                })
                errors.append((name, e))
                logger.warning("strategy_failed", strategy=name, error_type=type(e).__name__)

                is_last = i == len(self.strategies) - 1
                if is_last:
                    break
                if not self.should_fallback(e):
                    raise

                if self.on_fallback:
                    self.on_fallback(name, self.strategies[i + 1][0], e)
                continue

            attempts.append({"strategy": name, "success": True})
            return FallbackResult(result=result, strategy_used=name, attempts=attempts)

        if len(errors) == 1:
            raise errors[0][1]
        raise FallbackExhaustedError(errors)
