"""
================================================================================
Fallback Chains
================================================================================

Ordered strategy lists evaluated in sequence until the first success.

A strategy is a (name, callable) pair. Each run yields a tagged Attempt, so a
fallback policy is plain data that can be logged, reported and asserted on.

Usage:
    chain = FallbackChain([
        ("native", lambda: element.click()),
        ("script", lambda: element.evaluate("el => el.click()")),
    ])
    result = chain.run()
    result.succeeded, result.winner, result.last_error

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from loguru import logger


Strategy = Tuple[str, Callable[[], Any]]


@dataclass(frozen=True)
class Attempt:
    """
    Tagged result of one strategy.

    `error` is set when the strategy raised; a strategy that returned a value
    the chain did not accept has neither `succeeded` nor `error`.
    """

    strategy: str
    succeeded: bool
    value: Any = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class ChainResult:
    attempts: Tuple[Attempt, ...]

    @property
    def succeeded(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].succeeded

    @property
    def winner(self) -> Optional[Attempt]:
        return self.attempts[-1] if self.succeeded else None

    @property
    def value(self) -> Any:
        return self.winner.value if self.succeeded else None

    @property
    def last_error(self) -> Optional[BaseException]:
        for attempt in reversed(self.attempts):
            if attempt.error is not None:
                return attempt.error
        return None

    @property
    def all_raised(self) -> bool:
        """True when every strategy raised (none returned at all)."""
        return bool(self.attempts) and all(a.error is not None for a in self.attempts)


class FallbackChain:
    """Run strategies in order, stopping at the first accepted result."""

    def __init__(
        self,
        strategies: Sequence[Strategy],
        accept: Callable[[Any], bool] = lambda value: True,
        label: str = "",
    ) -> None:
        if not strategies:
            raise ValueError("FallbackChain needs at least one strategy")
        self.strategies = list(strategies)
        self.accept = accept
        self.label = label

    def run(self) -> ChainResult:
        attempts: List[Attempt] = []
        for index, (name, strategy) in enumerate(self.strategies):
            try:
                value = strategy()
            except Exception as e:
                attempts.append(Attempt(name, False, error=e))
                if index < len(self.strategies) - 1:
                    logger.warning(
                        f"{self.label or 'chain'}: strategy '{name}' failed: {e}. "
                        f"Trying '{self.strategies[index + 1][0]}'"
                    )
                continue

            if self.accept(value):
                attempts.append(Attempt(name, True, value=value))
                if index > 0:
                    logger.info(f"{self.label or 'chain'}: fallback '{name}' succeeded")
                break
            attempts.append(Attempt(name, False, value=value))

        return ChainResult(tuple(attempts))


__all__ = [
    "Attempt",
    "ChainResult",
    "FallbackChain",
    "Strategy",
]
