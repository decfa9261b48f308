"""
================================================================================
Harness Exceptions
================================================================================

Error taxonomy shared by the session registry, wait engine, interaction engine
and page objects.

    HarnessError
    ├── SessionCreationError    browser could not be launched (fatal)
    ├── InvalidSessionError     session closed while waiting
    ├── WaitTimeoutError        required predicate never became true
    ├── ElementNotReadyError    resolve step of an interaction failed
    ├── InteractionFailedError  primary and fallback execution both failed
    └── ConfigurationError      required setting missing or YAML invalid

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class HarnessError(Exception):
    """Base exception for all harness failures."""
    pass


class SessionCreationError(HarnessError):
    """Raised when a browser session cannot be started."""

    def __init__(self, message: str, browser: Optional[str] = None) -> None:
        super().__init__(message)
        self.browser = browser


class InvalidSessionError(HarnessError):
    """Raised when a required wait finds the session already closed."""

    def __init__(self, locator: Any, elapsed: float) -> None:
        super().__init__(
            f"Session became invalid while waiting for {locator} "
            f"(after {elapsed:.2f}s)"
        )
        self.locator = locator
        self.elapsed = elapsed


class WaitTimeoutError(HarnessError):
    """Raised when a required predicate is not satisfied within the timeout."""

    def __init__(
        self,
        locator: Any,
        timeout: float,
        elapsed: float,
        predicate: str = "",
    ) -> None:
        condition = f" to be {predicate}" if predicate else ""
        super().__init__(
            f"Timed out after {elapsed:.2f}s waiting for {locator}{condition} "
            f"(timeout={timeout}s)"
        )
        self.locator = locator
        self.timeout = timeout
        self.elapsed = elapsed
        self.predicate = predicate


class ElementNotReadyError(HarnessError):
    """Raised when an element never became ready for an interaction."""

    def __init__(self, locator: Any, action: str, outcome: Any = None) -> None:
        status = getattr(outcome, "status", None)
        detail = f" ({status.value})" if status is not None else ""
        super().__init__(f"Element {locator} not ready for '{action}'{detail}")
        self.locator = locator
        self.action = action
        self.outcome = outcome


class ConfigurationError(HarnessError):
    """Raised when configuration loading or access fails."""
    pass


class InteractionFailedError(HarnessError):
    """
    Raised when every execution strategy of an action failed.

    Attributes:
        locator: Locator the action targeted
        action: Action kind (click, type, get_text, ...)
        cause: Last underlying exception
        attempts: Tagged results of every strategy that ran
    """

    def __init__(
        self,
        locator: Any,
        action: str,
        cause: Optional[BaseException],
        attempts: Sequence[Any] = (),
    ) -> None:
        super().__init__(f"'{action}' failed on {locator}: {cause}")
        self.locator = locator
        self.action = action
        self.cause = cause
        self.attempts = tuple(attempts)


__all__ = [
    "HarnessError",
    "SessionCreationError",
    "InvalidSessionError",
    "WaitTimeoutError",
    "ElementNotReadyError",
    "InteractionFailedError",
    "ConfigurationError",
]
