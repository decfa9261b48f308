"""
================================================================================
Session Registry
================================================================================

Browser session lifecycle management, one session per execution context.

An execution context is a pytest-xdist worker plus the thread running in it.
Playwright's sync API is thread-affine, so every session owns its own
Playwright driver, browser, context and page, started on the acquiring thread.

Features:
    - Lazy creation on first acquire, reuse afterwards
    - Idempotent, error-tolerant release
    - Browser presets (chrome/firefox/safari) with password UI disabled
    - Console message capture for evidence bundles

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config_loader import ConfigLoader
from .exceptions import HarnessError, SessionCreationError


# Configured browser target -> Playwright engine
BROWSER_ENGINES: Dict[str, str] = {
    "chrome": "chromium",
    "chromium": "chromium",
    "firefox": "firefox",
    "safari": "webkit",
    "webkit": "webkit",
}

# Chromium switches: no notifications, no save-password bubble
CHROMIUM_ARGS: List[str] = [
    "--disable-notifications",
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-save-password-bubble",
    "--disable-features=PasswordManagerOnboarding,PasswordLeakDetection",
]

# Firefox prefs: never offer to remember or autofill credentials
FIREFOX_PREFS: Dict[str, Any] = {
    "signon.rememberSignons": False,
    "signon.autofillForms": False,
    "dom.webnotifications.enabled": False,
}

# Bound on console messages kept per session
CONSOLE_BUFFER_SIZE = 500


@dataclass(frozen=True)
class SessionSettings:
    """
    Launch and timeout settings shared (read-only) by every context.

    Timeouts are in seconds. `implicit_wait` is kept at 0: element lookups
    never auto-wait, explicit waiting belongs to the wait engine.
    """

    browser: str = "chrome"
    headless: bool = True
    window_width: int = 1920
    window_height: int = 1080
    implicit_wait: float = 0.0
    page_load_timeout: float = 60.0
    script_timeout: float = 30.0
    default_wait_timeout: float = 10.0
    poll_interval: float = 0.25
    native_action_timeout: float = 5.0
    teardown_delay: float = 0.0
    action_snapshots: bool = False
    capture_console: bool = True

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "SessionSettings":
        return cls(
            browser=str(config.get("ui.browser", "chrome")).lower(),
            headless=config.get_bool("ui.headless", True),
            window_width=config.get_int("ui.window.width", 1920),
            window_height=config.get_int("ui.window.height", 1080),
            page_load_timeout=config.get_float("ui.timeouts.page_load", 60.0),
            script_timeout=config.get_float("ui.timeouts.script", 30.0),
            default_wait_timeout=config.get_float("ui.timeouts.default_wait", 10.0),
            poll_interval=config.get_float("ui.timeouts.poll_interval", 0.25),
            native_action_timeout=config.get_float("ui.timeouts.native_action", 5.0),
            teardown_delay=config.get_int("ui.teardown.delay_ms", 0) / 1000.0,
            action_snapshots=config.get_bool("ui.evidence.action_snapshots", False),
            capture_console=config.get_bool("ui.evidence.console_log", True),
        )


@dataclass(frozen=True)
class ConsoleEntry:
    timestamp: datetime
    level: str
    message: str

    def format(self) -> str:
        return f"{self.timestamp.isoformat()} {self.level.upper()} {self.message}"


@dataclass(eq=False)
class Session:
    """
    One live browser connection owned by the registry.

    Attributes:
        context_key: Execution context owning this session
        page: Playwright page every engine operation runs against
        settings: Timeouts and capabilities the session was launched with
        browser_context / browser / playwright: Resources closed on release
        created_at: Creation timestamp (UTC)
    """

    context_key: str
    page: Any
    settings: SessionSettings = field(default_factory=SessionSettings)
    browser_context: Any = None
    browser: Any = None
    playwright: Any = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    capture_console: bool = True
    closed: bool = False
    _console: Deque[ConsoleEntry] = field(
        default_factory=lambda: deque(maxlen=CONSOLE_BUFFER_SIZE), repr=False
    )

    def __post_init__(self) -> None:
        if self.capture_console:
            self.page.on("console", self._record_console)

    def _record_console(self, message: Any) -> None:
        self._console.append(
            ConsoleEntry(
                timestamp=datetime.now(timezone.utc),
                level=str(message.type),
                message=str(message.text),
            )
        )

    def console_entries(self) -> List[ConsoleEntry]:
        """
        Console messages seen on the page so far.

        Raises:
            HarnessError: When console capture is not enabled
        """
        if not self.capture_console:
            raise HarnessError(
                f"Console capture unsupported for {self.settings.browser} session"
            )
        return list(self._console)

    @property
    def is_valid(self) -> bool:
        if self.closed:
            return False
        try:
            return not self.page.is_closed()
        except PlaywrightError:
            return False

    @property
    def url(self) -> str:
        return self.page.url

    def close(self) -> None:
        """Close page resources in reverse order; errors are logged, not raised."""
        if self.closed:
            return
        self.closed = True
        for name in ("browser_context", "browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                resource.close()
            except Exception as e:
                logger.warning(f"[{self.context_key}] Closing {name} failed: {e}")
        if self.playwright is not None:
            try:
                self.playwright.stop()
            except Exception as e:
                logger.warning(f"[{self.context_key}] Stopping Playwright failed: {e}")


def launch_session(context_key: str, settings: SessionSettings) -> Session:
    """
    Launch a browser and open a page with the configured capabilities.

    Raises:
        SessionCreationError: Unsupported target or browser failed to start
    """
    engine = BROWSER_ENGINES.get(settings.browser)
    if engine is None:
        raise SessionCreationError(
            f"Unsupported browser: {settings.browser}", browser=settings.browser
        )

    launch_options: Dict[str, Any] = {"headless": settings.headless}
    if engine == "chromium":
        launch_options["args"] = [
            *CHROMIUM_ARGS,
            f"--window-size={settings.window_width},{settings.window_height}",
        ]
    elif engine == "firefox":
        launch_options["firefox_user_prefs"] = FIREFOX_PREFS

    try:
        playwright = sync_playwright().start()
    except PlaywrightError as e:
        raise SessionCreationError(
            f"Failed to start Playwright for {settings.browser}: {e}",
            browser=settings.browser,
        ) from e

    try:
        browser = getattr(playwright, engine).launch(**launch_options)
        browser_context = browser.new_context(
            viewport={"width": settings.window_width, "height": settings.window_height},
            ignore_https_errors=True,
        )
        browser_context.set_default_timeout(settings.script_timeout * 1000)
        browser_context.set_default_navigation_timeout(settings.page_load_timeout * 1000)
        page = browser_context.new_page()
    except PlaywrightError as e:
        try:
            playwright.stop()
        except Exception as stop_error:
            logger.warning(f"Stopping Playwright after failed launch: {stop_error}")
        raise SessionCreationError(
            f"Failed to launch {settings.browser} ({engine}): {e}",
            browser=settings.browser,
        ) from e

    logger.debug(
        f"Browser started for [{context_key}]: {settings.browser} "
        f"(headless={settings.headless})"
    )
    return Session(
        context_key=context_key,
        page=page,
        settings=settings,
        browser_context=browser_context,
        browser=browser,
        playwright=playwright,
        capture_console=settings.capture_console,
    )


SessionLauncher = Callable[[str, SessionSettings], Session]


class SessionRegistry:
    """
    Owns the execution-context -> session mapping.

    The registry is the only component that creates or destroys sessions;
    everything else looks sessions up.

    Usage:
        registry = SessionRegistry(SessionSettings(browser="firefox"))
        session = registry.acquire()          # current worker/thread
        session.page.goto("https://example.com")
        registry.release()
    """

    def __init__(
        self,
        settings: Optional[SessionSettings] = None,
        launcher: Optional[SessionLauncher] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or SessionSettings()
        self._launcher = launcher or launch_session
        self._sleep = sleep
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    @staticmethod
    def current_context_key() -> str:
        """
        Key of the calling execution context: xdist worker, thread name and
        thread ident. Thread names are not unique; the ident is.
        """
        worker = os.environ.get("PYTEST_XDIST_WORKER", "main")
        thread = threading.current_thread()
        return f"{worker}:{thread.name}:{thread.ident}"

    def acquire(self, context_key: Optional[str] = None) -> Session:
        """
        Return the context's session, launching one on first demand.

        Raises:
            SessionCreationError: When the browser cannot be launched
        """
        key = context_key or self.current_context_key()
        with self._lock:
            existing = self._sessions.get(key)
        if existing is not None and not existing.closed:
            return existing

        session = self._launcher(key, self.settings)

        with self._lock:
            raced = self._sessions.get(key)
            if raced is not None and not raced.closed:
                duplicate = session
                session = raced
            else:
                duplicate = None
                self._sessions[key] = session
        if duplicate is not None:
            duplicate.close()

        logger.info(f"Session acquired for context [{key}]")
        return session

    def get(self, context_key: Optional[str] = None) -> Optional[Session]:
        key = context_key or self.current_context_key()
        with self._lock:
            return self._sessions.get(key)

    def release(self, context_key: Optional[str] = None) -> None:
        """Close and forget the context's session. Safe to call repeatedly."""
        key = context_key or self.current_context_key()
        with self._lock:
            session = self._sessions.pop(key, None)
        if session is None:
            return

        if self.settings.teardown_delay > 0 and session.is_valid:
            self._sleep(self.settings.teardown_delay)

        try:
            session.close()
        except Exception as e:
            logger.warning(f"Error while closing session [{key}]: {e}")
        logger.info(f"Session released for context [{key}]")

    def release_all(self) -> None:
        with self._lock:
            keys = list(self._sessions)
        for key in keys:
            self.release(key)

    def __contains__(self, context_key: str) -> bool:
        with self._lock:
            return context_key in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = [
    "BROWSER_ENGINES",
    "ConsoleEntry",
    "Session",
    "SessionRegistry",
    "SessionSettings",
    "launch_session",
]
