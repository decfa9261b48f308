import pytest

from loginsuite.ui_testing.framework.evidence import REDACTED
from loginsuite.ui_testing.framework.session_state import restore_cookies, restore_storage


def test_restore_cookies_adds_every_cookie(session, browser_context):
    restored = restore_cookies(session, [
        {"name": "lang", "value": "en", "domain": "localhost", "path": "/"},
        {"name": "theme", "value": "dark", "domain": "localhost", "path": "/"},
    ])

    assert restored == 2
    assert [c["name"] for c in browser_context.cookies()] == ["sid", "lang", "theme"]


def test_rejected_cookie_is_skipped(session, browser_context):
    browser_context.rejected_cookies.append("broken")

    restored = restore_cookies(session, [
        {"name": "broken", "value": "x"},
        {"name": "lang", "value": "en", "domain": "localhost", "path": "/"},
    ])

    assert restored == 1
    assert "broken" not in [c["name"] for c in browser_context.cookies()]


def test_redacted_cookies_are_not_written_back(session, browser_context):
    restored = restore_cookies(session, [{"name": "auth", "value": REDACTED, "domain": "localhost", "path": "/"}])

    assert restored == 0
    assert len(browser_context.cookies()) == 1


def test_restore_cookies_accepts_none(session):
    assert restore_cookies(session, None) == 0


def test_restore_local_storage(session, page):
    restored = restore_storage(session, {"theme": "dark", "visits": 3})

    assert restored == 2
    assert page.storage["localStorage"] == {"theme": "dark", "visits": "3"}
    assert page.storage["sessionStorage"] == {}


def test_restore_session_storage_skips_redacted_values(session, page):
    restore_storage(session, {"step": "2", "authToken": REDACTED}, kind="sessionStorage")

    assert page.storage["sessionStorage"] == {"step": "2"}


def test_empty_storage_is_a_no_op(session):
    assert restore_storage(session, {}) == 0
    assert restore_storage(session, None) == 0


def test_unknown_storage_kind_is_rejected(session):
    with pytest.raises(ValueError, match="indexedDB"):
        restore_storage(session, {"k": "v"}, kind="indexedDB")
