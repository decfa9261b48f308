"""
Fakes for browser-free unit tests.

FakePage / FakeElement / FakeContext mimic the slice of the Playwright sync
API the framework touches. Elements can appear or disappear at a given time
of the FakeClock, which also stands in for the wait engine's clock and sleep.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError

from loginsuite.ui_testing.framework.element_actions import (
    SCRIPT_CLICK,
    SCRIPT_SCROLL_INTO_VIEW,
    SCRIPT_SELECTED,
    SCRIPT_TEXT_CONTENT,
)
from loginsuite.ui_testing.framework.evidence import STORAGE_SCRIPT, USER_AGENT_SCRIPT
from loginsuite.ui_testing.framework.session_state import RESTORE_STORAGE_SCRIPT
from loginsuite.ui_testing.framework.wait_engine import OBSCURED_SCRIPT


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeElement:
    def __init__(
        self,
        visible: bool = True,
        enabled: bool = True,
        obscured: bool = False,
        size: Tuple[int, int] = (120, 32),
        text: str = "",
        text_content: Optional[str] = None,
        value: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
        checked: Optional[bool] = None,
        aria_selected: bool = False,
        native_click_error: Optional[str] = None,
        script_click_error: Optional[str] = None,
    ):
        self.visible = visible
        self.enabled = enabled
        self.obscured = obscured
        self.size = size
        self.text = text
        self.text_content = text if text_content is None else text_content
        self.value = value
        self.attributes = dict(attributes or {})
        self.checked = checked
        self.aria_selected = aria_selected
        self.native_click_error = native_click_error
        self.script_click_error = script_click_error
        self.calls: List[Tuple[str, Any]] = []

    @property
    def is_input(self) -> bool:
        return self.value is not None

    # -- state ----------------------------------------------------------------

    def is_visible(self) -> bool:
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    def bounding_box(self) -> Optional[Dict[str, float]]:
        if not self.visible:
            return None
        return {"x": 10, "y": 10, "width": self.size[0], "height": self.size[1]}

    def is_checked(self) -> bool:
        if self.checked is None:
            raise PlaywrightError("Not a checkbox or radio button")
        return self.checked

    # -- reads ----------------------------------------------------------------

    def inner_text(self, timeout: Optional[float] = None) -> str:
        return "" if self.is_input else self.text

    def input_value(self, timeout: Optional[float] = None) -> str:
        if not self.is_input:
            raise PlaywrightError("Node is not an <input>, <textarea> or <select> element")
        return self.value

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    # -- actions --------------------------------------------------------------

    def click(self, timeout: Optional[float] = None) -> None:
        self.calls.append(("click", timeout))
        if self.native_click_error:
            raise PlaywrightError(self.native_click_error)

    def fill(self, value: str, timeout: Optional[float] = None) -> None:
        self.calls.append(("fill", value))
        self.value = value

    def type(self, text: str, timeout: Optional[float] = None) -> None:
        self.calls.append(("type", text))
        self.value = (self.value or "") + text

    def hover(self, timeout: Optional[float] = None) -> None:
        self.calls.append(("hover", timeout))

    def scroll_into_view_if_needed(self, timeout: Optional[float] = None) -> None:
        self.calls.append(("scroll", timeout))

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == OBSCURED_SCRIPT:
            return self.obscured
        if script == SCRIPT_CLICK:
            self.calls.append(("script_click", None))
            if self.script_click_error:
                raise PlaywrightError(self.script_click_error)
            return None
        if script == SCRIPT_TEXT_CONTENT:
            return self.text_content
        if script == SCRIPT_SELECTED:
            return bool(self.checked) or self.aria_selected
        if script == SCRIPT_SCROLL_INTO_VIEW:
            self.calls.append(("script_scroll", None))
            return None
        raise PlaywrightError(f"Unexpected script: {script[:40]}")

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class FakePage:
    def __init__(self, clock: Optional[FakeClock] = None, url: str = "http://localhost:3000/login.html"):
        self.clock = clock or FakeClock()
        self.url = url
        self.closed = False
        self.html = "<html><body><form id='login'></form></body></html>"
        self.storage: Dict[str, Dict[str, str]] = {"localStorage": {}, "sessionStorage": {}}
        self.user_agent = "Mozilla/5.0 (FakeBrowser)"
        self.screenshot_error: Optional[str] = None
        self.content_error: Optional[str] = None
        self.screenshots = 0
        self.handlers: Dict[str, List[Any]] = {}
        self.navigations: List[Tuple[str, Optional[str]]] = []
        self._elements: Dict[str, List[Tuple[FakeElement, float, Optional[float]]]] = {}

    def add(
        self,
        selector: str,
        element: FakeElement,
        appears_at: float = 0.0,
        disappears_at: Optional[float] = None,
    ) -> FakeElement:
        """Register an element under a Playwright selector (e.g. 'css=#submit')."""
        self._elements.setdefault(selector, []).append((element, appears_at, disappears_at))
        return element

    def query_selector_all(self, selector: str) -> List[FakeElement]:
        now = self.clock.now
        return [
            element
            for element, appears_at, disappears_at in self._elements.get(selector, [])
            if now >= appears_at and (disappears_at is None or now < disappears_at)
        ]

    def is_closed(self) -> bool:
        return self.closed

    def on(self, event: str, handler: Any) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def emit_console(self, level: str, text: str) -> None:
        message = type("ConsoleMessage", (), {"type": level, "text": text})()
        for handler in self.handlers.get("console", []):
            handler(message)

    def goto(self, url: str, wait_until: Optional[str] = None) -> None:
        self.navigations.append((url, wait_until))
        self.url = url

    def screenshot(self, full_page: bool = False) -> bytes:
        if self.screenshot_error:
            raise PlaywrightError(self.screenshot_error)
        self.screenshots += 1
        return PNG_BYTES

    def content(self) -> str:
        if self.content_error:
            raise PlaywrightError(self.content_error)
        return self.html

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == STORAGE_SCRIPT:
            return dict(self.storage[arg])
        if script == USER_AGENT_SCRIPT:
            return self.user_agent
        if script == RESTORE_STORAGE_SCRIPT:
            kind, values = arg
            self.storage[kind].update({k: str(v) for k, v in values.items()})
            return len(values)
        raise PlaywrightError(f"Unexpected script: {script[:40]}")


class FakeContext:
    def __init__(self, cookies: Optional[List[Dict[str, Any]]] = None, close_error: Optional[str] = None):
        self._cookies = list(cookies or [])
        self.close_error = close_error
        self.closed = 0
        self.rejected_cookies: List[str] = []

    def add_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        for cookie in cookies:
            if cookie["name"] in self.rejected_cookies:
                raise PlaywrightError("Cookie should have either url or domain")
            self._cookies.append(dict(cookie))

    def cookies(self) -> List[Dict[str, Any]]:
        return list(self._cookies)

    def close(self) -> None:
        self.closed += 1
        if self.close_error:
            raise PlaywrightError(self.close_error)


class CollectingSink:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.attachments: List[Tuple[str, str, bytes, str]] = []

    def add_attachment(self, name: str, mime_type: str, content: bytes, extension: str) -> None:
        if self.fail:
            raise RuntimeError("report backend unavailable")
        self.attachments.append((name, mime_type, content, extension))

    @property
    def names(self) -> List[str]:
        return [a[0] for a in self.attachments]


