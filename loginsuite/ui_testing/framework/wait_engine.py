"""
================================================================================
Wait Engine
================================================================================

Explicit polling waits against a live session.

A predicate probes the current document for a locator and reports whether it
is satisfied (and with which element). The engine polls it at a fixed interval
until it is satisfied, the timeout elapses, or the session goes away, and
returns a terminal WaitOutcome. There is exactly one poll loop per call;
callers compose fallbacks by making several calls.

Predicates:
    - visible: exists, displayed, non-zero rendered size
    - interactable: visible, enabled and not obscured at its centre
    - absent: nothing matches or nothing matching is displayed
    - present: attached to the DOM
    - visible_with_text: visible with non-empty text

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from loguru import logger
from playwright.sync_api import Error as PlaywrightError

from .exceptions import InvalidSessionError, WaitTimeoutError
from .locators import Target, find_all


# Baseline explicit wait timeout in seconds
DEFAULT_TIMEOUT = 10.0

# Interval between predicate polls in seconds
DEFAULT_POLL_INTERVAL = 0.25

# True when another element covers the centre point of `el`.
# Elements outside the viewport are not considered obscured.
OBSCURED_SCRIPT = """
el => {
    const r = el.getBoundingClientRect();
    const x = r.left + r.width / 2;
    const y = r.top + r.height / 2;
    if (x < 0 || y < 0 || x > window.innerWidth || y > window.innerHeight) {
        return false;
    }
    const top = document.elementFromPoint(x, y);
    return top !== null && top !== el && !el.contains(top);
}
"""


@dataclass(frozen=True)
class Probe:
    """Result of evaluating a predicate once."""

    satisfied: bool
    element: Any = None


NOT_SATISFIED = Probe(False)

Predicate = Callable[[Any, Target], Probe]


# =============================================================================
# Element state checks
# =============================================================================

def _has_size(element: Any) -> bool:
    box = element.bounding_box()
    return bool(box) and box["width"] > 0 and box["height"] > 0


def _is_displayed(element: Any) -> bool:
    return element.is_visible() and _has_size(element)


def _is_obscured(element: Any) -> bool:
    return bool(element.evaluate(OBSCURED_SCRIPT))


def _text_of(element: Any) -> str:
    return (element.inner_text() or "").strip()


# =============================================================================
# Standard predicates
# =============================================================================

def visible(page: Any, target: Target) -> Probe:
    for element in find_all(page, target):
        if _is_displayed(element):
            return Probe(True, element)
    return NOT_SATISFIED


def interactable(page: Any, target: Target) -> Probe:
    for element in find_all(page, target):
        if _is_displayed(element) and element.is_enabled() and not _is_obscured(element):
            return Probe(True, element)
    return NOT_SATISFIED


def absent(page: Any, target: Target) -> Probe:
    for element in find_all(page, target):
        if _is_displayed(element):
            return NOT_SATISFIED
    return Probe(True)


def present(page: Any, target: Target) -> Probe:
    elements = find_all(page, target)
    if elements:
        return Probe(True, elements[0])
    return NOT_SATISFIED


def visible_with_text(page: Any, target: Target) -> Probe:
    for element in find_all(page, target):
        if _is_displayed(element) and _text_of(element):
            return Probe(True, element)
    return NOT_SATISFIED


PREDICATES: Dict[str, Predicate] = {
    "visible": visible,
    "interactable": interactable,
    "absent": absent,
    "present": present,
    "visible_with_text": visible_with_text,
}


def resolve_predicate(predicate: Union[str, Predicate]) -> Predicate:
    if callable(predicate):
        return predicate
    try:
        return PREDICATES[predicate]
    except KeyError:
        raise ValueError(f"Unknown predicate: {predicate}") from None


def _predicate_name(predicate: Union[str, Predicate]) -> str:
    if isinstance(predicate, str):
        return predicate
    return getattr(predicate, "__name__", "custom")


# =============================================================================
# Outcome
# =============================================================================

class WaitStatus(Enum):
    READY = "ready"
    TIMEOUT = "timeout"
    INVALID_SESSION = "invalid_session"


@dataclass(frozen=True)
class WaitOutcome:
    """
    Terminal result of one wait.

    Attributes:
        status: READY, TIMEOUT or INVALID_SESSION
        target: Locator (or group) that was waited on
        elapsed: Seconds spent polling
        timeout: Requested timeout in seconds
        element: Ready element handle (READY only, may be None for `absent`)
        predicate: Name of the predicate polled
    """

    status: WaitStatus
    target: Any
    elapsed: float
    timeout: float
    element: Any = None
    predicate: str = ""

    @property
    def ready(self) -> bool:
        return self.status is WaitStatus.READY

    def __bool__(self) -> bool:
        return self.ready

    def require(self) -> Any:
        """
        Return the element of a READY outcome.

        Raises:
            WaitTimeoutError: Outcome is a timeout
            InvalidSessionError: Session became invalid while waiting
        """
        if self.status is WaitStatus.TIMEOUT:
            raise WaitTimeoutError(self.target, self.timeout, self.elapsed, self.predicate)
        if self.status is WaitStatus.INVALID_SESSION:
            raise InvalidSessionError(self.target, self.elapsed)
        return self.element


# =============================================================================
# Engine
# =============================================================================

class WaitEngine:
    """
    Polls predicates against a session until satisfied or timed out.

    Usage:
        waits = WaitEngine(default_timeout=10)
        outcome = waits.wait_until(session, "visible", Locator.id("email"))
        if outcome.ready:
            outcome.element.click()

        # "require" semantics: raise instead of returning a timeout
        element = waits.wait_for_interactable(session, Locator.id("loginBtn"))
    """

    def __init__(
        self,
        default_timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.default_timeout = default_timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Any) -> "WaitEngine":
        return cls(
            default_timeout=settings.default_wait_timeout,
            poll_interval=settings.poll_interval,
        )

    def _probe(self, session: Any, predicate: Predicate, target: Target) -> Probe:
        try:
            return predicate(session.page, target)
        except PlaywrightError as e:
            # Element detached or page navigating mid-probe; poll again
            logger.trace(f"Probe of {target} raised: {e}")
            return NOT_SATISFIED

    def wait_until(
        self,
        session: Any,
        predicate: Union[str, Predicate],
        target: Target,
        timeout: Optional[float] = None,
        require: bool = False,
    ) -> WaitOutcome:
        """
        Poll `predicate` for `target` until satisfied or `timeout` elapses.

        Args:
            session: Session to poll against
            predicate: Predicate name from PREDICATES or a callable
            target: Locator or LocatorGroup
            timeout: Seconds to wait (default_timeout when None)
            require: Raise instead of returning a non-ready outcome

        Returns:
            WaitOutcome (READY, TIMEOUT or INVALID_SESSION)

        Raises:
            WaitTimeoutError / InvalidSessionError: Only with require=True
        """
        check = resolve_predicate(predicate)
        name = _predicate_name(predicate)
        timeout = self.default_timeout if timeout is None else timeout

        start = self._clock()
        deadline = start + timeout

        while True:
            if not session.is_valid:
                outcome = WaitOutcome(
                    WaitStatus.INVALID_SESSION, target, self._clock() - start, timeout,
                    predicate=name,
                )
                break

            probe = self._probe(session, check, target)
            now = self._clock()
            if probe.satisfied:
                outcome = WaitOutcome(
                    WaitStatus.READY, target, now - start, timeout,
                    element=probe.element, predicate=name,
                )
                break

            if now >= deadline:
                outcome = WaitOutcome(
                    WaitStatus.TIMEOUT, target, now - start, timeout, predicate=name,
                )
                break

            self._sleep(min(self.poll_interval, deadline - now))

        logger.debug(
            f"Wait for {target} to be {name}: {outcome.status.value} "
            f"after {outcome.elapsed:.2f}s"
        )
        if require:
            outcome.require()
        return outcome

    # -------------------------------------------------------------------------
    # Convenience waits
    # -------------------------------------------------------------------------

    def wait_for_visible(self, session: Any, target: Target, timeout: Optional[float] = None) -> Any:
        return self.wait_until(session, visible, target, timeout, require=True).element

    def wait_for_interactable(self, session: Any, target: Target, timeout: Optional[float] = None) -> Any:
        return self.wait_until(session, interactable, target, timeout, require=True).element

    def wait_for_absent(self, session: Any, target: Target, timeout: Optional[float] = None) -> bool:
        return self.wait_until(session, absent, target, timeout).ready

    def is_present(self, session: Any, target: Target, timeout: float = 0.0) -> bool:
        return self.wait_until(session, present, target, timeout).ready

    def wait_for_url(
        self,
        session: Any,
        fragment: str,
        timeout: Optional[float] = None,
    ) -> bool:
        """Poll until the current URL contains `fragment` (case-insensitive)."""
        wanted = fragment.lower()

        def url_contains(page: Any, _target: Any) -> Probe:
            return Probe(wanted in (page.url or "").lower())

        url_contains.__name__ = f"url containing '{fragment}'"
        return self.wait_until(session, url_contains, _UrlTarget(fragment), timeout).ready


@dataclass(frozen=True)
class _UrlTarget:
    fragment: str

    def __str__(self) -> str:
        return f"url~{self.fragment}"


__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_POLL_INTERVAL",
    "OBSCURED_SCRIPT",
    "PREDICATES",
    "Predicate",
    "Probe",
    "WaitEngine",
    "WaitOutcome",
    "WaitStatus",
    "absent",
    "interactable",
    "present",
    "visible",
    "visible_with_text",
]
