"""
================================================================================
Session State Restore
================================================================================

Puts exported browser state (cookies, web storage) back into a live session,
e.g. to resume a logged-in state exported from an earlier session.

Redacted values are placeholders, not state: entries carrying the redaction
marker are skipped rather than written back.

Usage:
    cookies = previous.browser_context.cookies()
    restore_cookies(session, cookies)
    restore_storage(session, {"theme": "dark"}, kind="localStorage")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from loguru import logger
from playwright.sync_api import Error as PlaywrightError

from .evidence import REDACTED


STORAGE_KINDS = ("localStorage", "sessionStorage")

RESTORE_STORAGE_SCRIPT = """
([kind, values]) => {
    const store = window[kind];
    for (const [key, value] of Object.entries(values)) {
        store.setItem(key, String(value));
    }
    return Object.keys(values).length;
}
"""


def restore_cookies(session: Any, cookies: Optional[Iterable[Dict[str, Any]]]) -> int:
    """
    Add cookies to the session's browser context one at a time.

    A cookie the browser rejects is logged and skipped.

    Returns:
        Number of cookies restored
    """
    restored = 0
    for cookie in cookies or ():
        name = cookie.get("name", "")
        if cookie.get("value") == REDACTED:
            logger.debug(f"[{session.context_key}] Skipping redacted cookie: {name}")
            continue
        try:
            session.browser_context.add_cookies([cookie])
        except PlaywrightError as e:
            logger.warning(f"[{session.context_key}] Failed to add cookie '{name}': {e}")
            continue
        restored += 1
    logger.info(f"[{session.context_key}] Restored {restored} cookies")
    return restored


def restore_storage(
    session: Any,
    values: Optional[Dict[str, Any]],
    kind: str = "localStorage",
) -> int:
    """
    Write key/value pairs into web storage of the page's current origin.

    The page must already be on the origin the state belongs to.

    Raises:
        ValueError: Unknown storage kind
    """
    if kind not in STORAGE_KINDS:
        raise ValueError(f"Unknown storage kind: {kind} (expected one of {STORAGE_KINDS})")
    entries = {key: value for key, value in (values or {}).items() if value != REDACTED}
    if not entries:
        return 0
    session.page.evaluate(RESTORE_STORAGE_SCRIPT, [kind, entries])
    logger.info(f"[{session.context_key}] Restored {len(entries)} {kind} entries")
    return len(entries)


__all__ = [
    "RESTORE_STORAGE_SCRIPT",
    "STORAGE_KINDS",
    "restore_cookies",
    "restore_storage",
]
