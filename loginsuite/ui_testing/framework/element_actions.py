# ================================================================================
# Element Actions Module
# ================================================================================
#
# Resilient element interactions built on the wait engine.
#
# Every action runs the same state machine:
#   1. Resolve   - wait for the element to be ready (interactable / visible)
#   2. Execute   - run the action's strategies in order (native first)
#   3. Fallback  - e.g. a scripted click when the native click is rejected
#   4. Outcome   - return, or capture evidence and raise
#
# Key Features:
#   - Explicit waits instead of implicit ones
#   - Fallback policies declared as data (FallbackChain)
#   - Evidence capture at failure boundaries only
#   - Optional before/after screenshots per action
#   - Allure step integration
#
# ================================================================================

from typing import Any, Callable, List, Optional

import allure
from loguru import logger

from .evidence import EvidenceCapture
from .exceptions import ElementNotReadyError, InteractionFailedError
from .fallback import ChainResult, FallbackChain, Strategy
from .locators import Target, find_all
from .session_registry import Session
from .wait_engine import WaitEngine, interactable, visible


SCRIPT_CLICK = "el => el.click()"

SCRIPT_SCROLL_INTO_VIEW = "el => el.scrollIntoView({block: 'center', inline: 'nearest'})"

SCRIPT_TEXT_CONTENT = "el => el.textContent || ''"

SCRIPT_SELECTED = """
el => !!(
    el.checked ||
    el.selected ||
    el.getAttribute('aria-checked') === 'true' ||
    el.getAttribute('aria-selected') === 'true'
)
"""


def _non_empty(value: Any) -> bool:
    return bool(value and str(value).strip())


class ElementActions:
    """
    Interaction engine: semantic actions on locators with fallbacks.

    Example:
        actions = ElementActions(WaitEngine(), EvidenceCapture(AllureEvidenceSink()))
        actions.type_text(session, Locator.id("email"), "user@example.com")
        actions.click(session, Locator.id("loginBtnText"))
        actions.get_text(session, Locator.css(".error-message"))
    """

    def __init__(
        self,
        waits: WaitEngine,
        evidence: Optional[EvidenceCapture] = None,
        native_timeout: float = 5.0,
        action_snapshots: bool = False,
    ):
        """
        Initialize ElementActions.

        Args:
            waits: Wait engine used for the resolve step
            evidence: Evidence capture invoked on failure
            native_timeout: Timeout for native Playwright actions in seconds
            action_snapshots: Attach before/after screenshots to each action
        """
        self.waits = waits
        self.evidence = evidence or EvidenceCapture()
        self.native_timeout_ms = native_timeout * 1000
        self.action_snapshots = action_snapshots

    @classmethod
    def from_settings(cls, settings: Any, evidence: Optional[EvidenceCapture] = None) -> "ElementActions":
        return cls(
            WaitEngine.from_settings(settings),
            evidence,
            native_timeout=settings.native_action_timeout,
            action_snapshots=settings.action_snapshots,
        )

    # =========================================================================
    # Actions
    # =========================================================================

    @allure.step("Click element: {target}")
    def click(
        self,
        session: Session,
        target: Target,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Click an element, falling back to a scripted click.

        The scripted click bypasses hit-testing, which rescues elements that
        are interactable but covered by an overlay or still animating.

        Args:
            session: Session to act on
            target: Locator of the element
            timeout: Resolve timeout in seconds
        """
        def strategies(element: Any) -> List[Strategy]:
            return [
                ("native", lambda: element.click(timeout=self.native_timeout_ms)),
                ("script", lambda: element.evaluate(SCRIPT_CLICK)),
            ]

        self._perform(session, target, "click", interactable, strategies, timeout)
        logger.info(f"Clicked element: {target}")

    def type_text(
        self,
        session: Session,
        target: Target,
        text: str,
        timeout: Optional[float] = None,
        sensitive: bool = False,
    ) -> None:
        """
        Clear an input and type `text` into it.

        Opens its Allure step manually so the typed value is never recorded
        as a step parameter.

        Args:
            session: Session to act on
            target: Locator of the input
            text: Text to type
            timeout: Resolve timeout in seconds
            sensitive: Mask the value in logs
        """
        def clear_and_type(element: Any) -> None:
            element.fill("", timeout=self.native_timeout_ms)
            if text:
                element.type(text, timeout=self.native_timeout_ms)

        def strategies(element: Any) -> List[Strategy]:
            return [("native", lambda: clear_and_type(element))]

        with allure.step(f"Type text into: {target}"):
            self._perform(session, target, "type", interactable, strategies, timeout)
        shown = "*" * min(len(text), 8) if sensitive else text
        logger.info(f"Typed '{shown}' into element: {target}")

    @allure.step("Get text: {target}")
    def get_text(
        self,
        session: Session,
        target: Target,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Read the trimmed text of an element.

        Rendered text first; when that is empty the text content, the live
        input value, then the `value` attribute. Returns "" when no source
        has text.
        """
        def strategies(element: Any) -> List[Strategy]:
            return [
                ("inner_text", lambda: element.inner_text(timeout=self.native_timeout_ms)),
                ("text_content", lambda: element.evaluate(SCRIPT_TEXT_CONTENT)),
                ("input_value", lambda: element.input_value(timeout=self.native_timeout_ms)),
                ("value_attribute", lambda: element.get_attribute("value")),
            ]

        text = self._perform(
            session, target, "get_text", visible, strategies, timeout, accept=_non_empty,
        )
        text = (text or "").strip()
        logger.debug(f"Got text from {target}: '{text}'")
        return text

    @allure.step("Is selected: {target}")
    def is_selected(
        self,
        session: Session,
        target: Target,
        timeout: Optional[float] = None,
    ) -> bool:
        """Read the selection state of a checkbox, radio, option or ARIA widget."""
        def strategies(element: Any) -> List[Strategy]:
            return [
                ("native", lambda: element.is_checked()),
                ("script", lambda: element.evaluate(SCRIPT_SELECTED)),
            ]

        selected = self._perform(session, target, "is_selected", visible, strategies, timeout)
        return bool(selected)

    @allure.step("Hover element: {target}")
    def hover(self, session: Session, target: Target, timeout: Optional[float] = None) -> None:
        def strategies(element: Any) -> List[Strategy]:
            return [("native", lambda: element.hover(timeout=self.native_timeout_ms))]

        self._perform(session, target, "hover", visible, strategies, timeout)
        logger.info(f"Hovered on element: {target}")

    @allure.step("Scroll into view: {target}")
    def scroll_into_view(self, session: Session, target: Target, timeout: Optional[float] = None) -> None:
        def strategies(element: Any) -> List[Strategy]:
            return [
                ("native", lambda: element.scroll_into_view_if_needed(timeout=self.native_timeout_ms)),
                ("script", lambda: element.evaluate(SCRIPT_SCROLL_INTO_VIEW)),
            ]

        self._perform(session, target, "scroll_into_view", visible, strategies, timeout)
        logger.info(f"Scrolled into view: {target}")

    def is_displayed(self, session: Session, target: Target) -> bool:
        """Non-waiting visibility check; any error reads as not displayed."""
        try:
            return any(el.is_visible() for el in find_all(session.page, target))
        except Exception:
            return False

    # =========================================================================
    # State machine
    # =========================================================================

    def _perform(
        self,
        session: Session,
        target: Target,
        action: str,
        predicate: Callable[[Any, Target], Any],
        strategies: Callable[[Any], List[Strategy]],
        timeout: Optional[float],
        accept: Callable[[Any], bool] = lambda value: True,
    ) -> Any:
        outcome = self.waits.wait_until(session, predicate, target, timeout)
        if not outcome.ready:
            logger.error(f"Element {target} not ready for '{action}': {outcome.status.value}")
            self.evidence.capture_failure(session, f"{action} not ready - {target}")
            raise ElementNotReadyError(target, action, outcome)

        self._snapshot(session, f"Before {action} - {target}")
        try:
            result = FallbackChain(
                strategies(outcome.element), accept=accept, label=f"{action} {target}",
            ).run()
        finally:
            self._snapshot(session, f"After {action} - {target}")

        if result.succeeded:
            return result.value
        if not result.all_raised:
            # Every strategy ran; none produced an accepted value
            return self._last_value(result)

        cause = result.last_error
        logger.error(f"All '{action}' attempts failed for element {target}: {cause}")
        self.evidence.capture_failure(session, f"{action} failed - {target}")
        raise InteractionFailedError(target, action, cause, result.attempts) from cause

    @staticmethod
    def _last_value(result: ChainResult) -> Any:
        for attempt in reversed(result.attempts):
            if attempt.error is None:
                return attempt.value
        return None

    def _snapshot(self, session: Session, name: str) -> None:
        if self.action_snapshots:
            self.evidence.snapshot(session, name)


__all__ = [
    "ElementActions",
    "SCRIPT_CLICK",
    "SCRIPT_SELECTED",
    "SCRIPT_TEXT_CONTENT",
    "SCRIPT_SCROLL_INTO_VIEW",
]
