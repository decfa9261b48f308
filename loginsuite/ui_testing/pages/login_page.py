"""
================================================================================
Login Page Object (Playwright / sync)
================================================================================

Login page: credentials form, error banners, "remember me", the forgot-password
modal and the post-login check.

Design goals:
  - Every interaction goes through the interaction engine (resolve, execute,
    fallback, evidence on failure)
  - "Is logged in" is an ordered marker chain, first satisfied wins
  - Passwords never reach the logs unmasked

================================================================================
"""

from __future__ import annotations

from typing import List, Optional

import allure
from loguru import logger
from playwright.sync_api import Error as PlaywrightError

from loginsuite.ui_testing.framework.element_actions import ElementActions
from loginsuite.ui_testing.framework.locators import Locator, Target, find_all
from loginsuite.ui_testing.framework.page_base import BasePage
from loginsuite.ui_testing.framework.session_registry import Session
from loginsuite.ui_testing.framework.smart_locator import Marker


# Post-login markers need room for slow redirects
LOGGED_IN_MARKER_TIMEOUT = 15.0


def _url_indicates_logged_in(url: str) -> bool:
    url = (url or "").lower()
    return "dashboard" in url or url.endswith("/") or "index" in url


class LoginPage(BasePage):
    """Login page object."""

    URL_PATH = "login.html"
    PAGE_TITLE = "Login"

    # Form
    EMAIL = Locator.id("email")
    PASSWORD = Locator.id("password")
    LOGIN_BUTTON = Locator.id("loginBtnText")
    REMEMBER_ME = Locator.id("rememberMe")

    # Messages
    ERROR_MESSAGE = Locator.css(".error-message")
    ALERT_MESSAGE = Locator.id("alertMessage")
    ALERT_PANEL = Locator.css(".alert.alert-custom.alert-danger")
    ERROR_MESSAGES = Locator.any_of(ERROR_MESSAGE, ALERT_MESSAGE, ALERT_PANEL)
    SUCCESS_MESSAGE = Locator.xpath("//*[contains(normalize-space(.), 'Login successful! Redirecting')]")

    # Logged-in markers
    DASHBOARD_ICON = Locator.css(".bi.bi-grid-fill.me-2")
    DASHBOARD_ICON_ALT = Locator.xpath("//*[contains(@class,'bi') and contains(@class,'bi-grid-fill')]")
    USER_AVATAR = Locator.css(".user-avatar, .avatar, img[alt*='profile']")

    # Links and forgot-password modal
    FORGOT_PASSWORD_LINK = Locator.id("forgotPasswordLink")
    SIGN_UP_LINK = Locator.css('a[href="register.html"]')
    BACK_TO_HOME = Locator.css("div.back-home a")
    FORGOT_PASSWORD_MODAL = Locator.id("forgotPasswordModal")
    RESET_EMAIL = Locator.id("resetEmail")
    RESET_SUBMIT = Locator.xpath('//form[@id="forgotPasswordForm"]//button[@class="btn btn-login"]')

    def __init__(
        self,
        session: Session,
        actions: ElementActions,
        base_url: str,
        login_path: Optional[str] = None,
    ):
        super().__init__(session, actions, base_url)
        if login_path:
            self.URL_PATH = login_path

    # =========================================================================
    # Form
    # =========================================================================

    @allure.step("Open login page")
    def open(self) -> "LoginPage":
        self.navigate()
        logger.info("Login page opened")
        return self

    @allure.step("Enter email: {email}")
    def enter_email(self, email: str) -> "LoginPage":
        logger.info(f"Entering email: {email}")
        self.type_text(self.EMAIL, email)
        return self

    def enter_password(self, password: str) -> "LoginPage":
        masked = "*" * min(len(password or ""), 8)
        with allure.step("Enter password"):
            logger.info(f"Entering password (masked): {masked}")
            self.type_text(self.PASSWORD, password or "", sensitive=True)
        return self

    @allure.step("Click Login")
    def click_login(self) -> "LoginPage":
        logger.info("Clicking Login button")
        self.click(self.LOGIN_BUTTON)
        logger.info("Login click submitted")
        return self

    def login(self, email: str, password: str) -> "LoginPage":
        # Manual step: the password must not become a step parameter
        with allure.step(f"Login as {email}"):
            return self.enter_email(email).enter_password(password).click_login()

    @allure.step("Toggle Remember Me to {checked}")
    def toggle_remember_me(self, checked: bool) -> "LoginPage":
        if self.is_selected(self.REMEMBER_ME) != checked:
            self.click(self.REMEMBER_ME)
        logger.info(f"Remember Me desired={checked}, actual={self.is_selected(self.REMEMBER_ME)}")
        return self

    # =========================================================================
    # Outcome checks
    # =========================================================================

    @allure.step("Verify user is logged in")
    def is_logged_in(self) -> bool:
        """
        Walk the logged-in markers in order; the URL heuristic comes last.

        Markers: dashboard icon, any dashboard icon variant, user avatar,
        then a URL that looks like the dashboard or home page.
        """
        marker = self.first_satisfied("logged_in", [
            Marker("dashboard icon", self.DASHBOARD_ICON, timeout=LOGGED_IN_MARKER_TIMEOUT),
            Marker("dashboard icon variant", self.DASHBOARD_ICON_ALT, timeout=LOGGED_IN_MARKER_TIMEOUT),
            Marker("user avatar", self.USER_AVATAR, timeout=LOGGED_IN_MARKER_TIMEOUT),
            Marker.heuristic("dashboard url", lambda session: _url_indicates_logged_in(session.url)),
        ])
        if marker is None:
            logger.info(f"Not logged in (url: {self.current_url})")
            return False
        logger.info(f"Logged in, marker: {marker.name}")
        return True

    @allure.step("Wait for transient success message")
    def wait_for_transient_success_message(self, timeout: Optional[float] = None) -> bool:
        """True when the success banner appeared and then went away."""
        if not self.is_visible(self.SUCCESS_MESSAGE, timeout=timeout or self.waits.default_timeout):
            logger.info("Transient success message not observed")
            return False
        if not self.wait_for_absent(self.SUCCESS_MESSAGE, timeout):
            logger.info("Success message appeared but did not disappear")
            return False
        logger.info("Transient success message appeared and disappeared")
        return True

    @allure.step("Wait for any error visible within {seconds}s")
    def wait_for_any_error_visible(self, seconds: float) -> bool:
        logger.info(f"Waiting up to {seconds}s for any error message")
        found = self.waits.wait_until(
            self.session, "visible_with_text", self.ERROR_MESSAGES, timeout=seconds,
        ).ready
        if not found:
            logger.info(f"No error message found within {seconds}s")
        return found

    @allure.step("Get error text")
    def get_error_text(self) -> str:
        """First visible, non-empty error text in priority order, or ""."""
        messages = self._visible_texts(self.ERROR_MESSAGES)
        if not messages:
            logger.info("No error text found")
            return ""
        logger.info(f"Error text: '{messages[0]}'")
        return messages[0]

    @allure.step("Get all visible error messages")
    def get_all_visible_error_messages(self) -> List[str]:
        messages = self._visible_texts(self.ERROR_MESSAGES)
        logger.info(f"Collected {len(messages)} visible error messages")
        return messages

    def _visible_texts(self, target: Target) -> List[str]:
        texts = []
        for element in find_all(self.page, target):
            try:
                if not element.is_visible():
                    continue
                text = (element.inner_text() or "").strip()
            except PlaywrightError as e:
                logger.debug(f"Skipping detached error element: {e}")
                continue
            if text:
                texts.append(text)
        return texts

    # =========================================================================
    # Links and forgot-password flow
    # =========================================================================

    @allure.step("Click Forgot Password")
    def click_forgot_password(self) -> "LoginPage":
        logger.info("Clicking Forgot Password link")
        self.click(self.FORGOT_PASSWORD_LINK)
        return self

    @allure.step("Click Sign Up Now")
    def click_sign_up_now(self) -> "LoginPage":
        logger.info("Clicking Sign Up link")
        self.click(self.SIGN_UP_LINK)
        return self

    @allure.step("Click Back To Home")
    def click_back_to_home(self) -> "LoginPage":
        logger.info("Clicking Back To Home link")
        self.scroll_into_view(self.BACK_TO_HOME, timeout=LOGGED_IN_MARKER_TIMEOUT)
        self.screenshot("Before BackToHome click")
        try:
            self.click(self.BACK_TO_HOME, timeout=LOGGED_IN_MARKER_TIMEOUT)
        finally:
            self.screenshot("After BackToHome click")
        return self

    @allure.step("Open Forgot Password modal")
    def open_forgot_password_modal(self) -> "LoginPage":
        logger.info("Opening Forgot Password modal")
        self.click(self.FORGOT_PASSWORD_LINK)
        self.waits.wait_for_visible(self.session, self.FORGOT_PASSWORD_MODAL)
        logger.info("Forgot Password modal visible")
        return self

    @allure.step("Enter reset email: {email}")
    def enter_reset_email(self, email: str) -> "LoginPage":
        logger.info(f"Entering reset email: {email}")
        self.type_text(self.RESET_EMAIL, email)
        return self

    @allure.step("Submit reset form")
    def submit_reset_form(self) -> "LoginPage":
        logger.info("Submitting reset form")
        self.click(self.RESET_SUBMIT)
        self.waits.wait_until(self.session, "absent", self.FORGOT_PASSWORD_MODAL, require=True)
        logger.info("Reset form submitted, modal closed")
        return self

    @allure.step("Get reset password confirmation text")
    def get_reset_password_confirmation_text(self) -> str:
        text = self.get_text(self.ALERT_MESSAGE)
        logger.info(f"Reset confirmation text length: {len(text)}")
        return text

    def is_forgot_modal_closed(self) -> bool:
        return not self.is_displayed(self.FORGOT_PASSWORD_MODAL)


__all__ = ["LoginPage"]
