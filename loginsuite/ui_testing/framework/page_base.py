"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation and URL handling
    - Resilient element interaction (delegated to ElementActions)
    - Ordered marker chains (SmartLocator)
    - Screenshot and failure evidence utilities
    - Wait strategies

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional, Sequence

import allure
from loguru import logger

from .element_actions import ElementActions
from .locators import Target
from .session_registry import Session
from .smart_locator import Marker, SmartLocator


class BasePage:
    """
    Base class for all page objects.

    Provides common functionality for:
        - Navigation and URL handling
        - Element interaction through the interaction engine
        - Screenshot capture
        - Wait utilities

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "login.html"

            def login(self, email: str, password: str):
                self.type_text(self.EMAIL, email)
                self.type_text(self.PASSWORD, password, sensitive=True)
                self.click(self.LOGIN_BUTTON)
    """

    # Override in subclasses
    URL_PATH: str = ""
    PAGE_TITLE: str = ""

    def __init__(
        self,
        session: Session,
        actions: ElementActions,
        base_url: str,
    ):
        """
        Initialize page object.

        Args:
            session: Session owning the browser page
            actions: Interaction engine
            base_url: Base URL for the application
        """
        self.session = session
        self.actions = actions
        self.waits = actions.waits
        self.evidence = actions.evidence
        self.base_url = base_url.rstrip("/")
        self.smart = SmartLocator(self.waits)

    @property
    def page(self):
        return self.session.page

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}/{self.URL_PATH.lstrip('/')}"

    @property
    def current_url(self) -> str:
        return self.session.url

    def navigate(self) -> None:
        """Navigate to this page, waiting for the load event."""
        self.navigate_to(self.URL_PATH)

    def navigate_to(self, path: str) -> None:
        """
        Navigate to specific path.

        Args:
            path: URL path relative to the base URL
        """
        full_url = f"{self.base_url}/{path.lstrip('/')}"
        with allure.step(f"Navigate to {path or '/'}"):
            logger.info(f"Opening page: {full_url}")
            self.page.goto(full_url, wait_until="load")
            logger.debug(f"Navigated to: {self.page.url}")

    # =========================================================================
    # Element Interactions
    # =========================================================================

    def click(self, target: Target, timeout: Optional[float] = None) -> None:
        self.actions.click(self.session, target, timeout)

    def type_text(
        self,
        target: Target,
        text: str,
        timeout: Optional[float] = None,
        sensitive: bool = False,
    ) -> None:
        self.actions.type_text(self.session, target, text, timeout, sensitive=sensitive)

    def get_text(self, target: Target, timeout: Optional[float] = None) -> str:
        return self.actions.get_text(self.session, target, timeout)

    def is_selected(self, target: Target, timeout: Optional[float] = None) -> bool:
        return self.actions.is_selected(self.session, target, timeout)

    def hover(self, target: Target, timeout: Optional[float] = None) -> None:
        self.actions.hover(self.session, target, timeout)

    def scroll_into_view(self, target: Target, timeout: Optional[float] = None) -> None:
        self.actions.scroll_into_view(self.session, target, timeout)

    def is_visible(self, target: Target, timeout: float = 2.0) -> bool:
        """
        Check if element becomes visible within `timeout`.

        Never raises; a timeout or an invalid session reads as False.
        """
        return self.waits.wait_until(self.session, "visible", target, timeout).ready

    def is_displayed(self, target: Target) -> bool:
        return self.actions.is_displayed(self.session, target)

    def first_satisfied(self, chain_name: str, markers: Sequence[Marker]) -> Optional[Marker]:
        return self.smart.first_satisfied(self.session, chain_name, markers)

    # =========================================================================
    # Wait Utilities
    # =========================================================================

    def wait_for_url_contains(self, fragment: str, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current URL to contain `fragment`.

        Args:
            fragment: Case-insensitive URL substring
            timeout: Timeout in seconds

        Returns:
            True if the URL matched in time
        """
        with allure.step(f"Wait for URL containing: {fragment}"):
            return self.waits.wait_for_url(self.session, fragment, timeout)

    def wait_for_absent(self, target: Target, timeout: Optional[float] = None) -> bool:
        return self.waits.wait_for_absent(self.session, target, timeout)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    def screenshot(self, name: str) -> Optional[bytes]:
        """
        Take a best-effort screenshot and hand it to the evidence sink.

        Returns:
            PNG bytes, or None when the page could not be captured
        """
        image = self.evidence.snapshot(self.session, name)
        if image is not None:
            logger.debug(f"Screenshot captured: {name}")
        return image

    def capture_failure(self, label: str):
        """Capture a full evidence bundle for this page's session."""
        with allure.step("Capture failure details"):
            return self.evidence.capture_failure(self.session, label)

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
]
