import pytest
from playwright.sync_api import Error as PlaywrightError

from loginsuite.ui_testing.framework.exceptions import InvalidSessionError, WaitTimeoutError
from loginsuite.ui_testing.framework.locators import Locator
from loginsuite.ui_testing.framework.wait_engine import (
    WaitEngine,
    WaitStatus,
    absent,
    interactable,
    visible,
)

from .fakes import FakeElement


def test_returns_ready_as_soon_as_element_becomes_interactable(page, session, waits, clock):
    button = page.add("css=#submit", FakeElement(), appears_at=2.0)

    outcome = waits.wait_until(session, interactable, Locator.css("#submit"), timeout=10)

    assert outcome.status is WaitStatus.READY
    assert outcome.element is button
    assert 2.0 <= outcome.elapsed < 2.0 + waits.poll_interval
    assert clock.now < 10


def test_times_out_within_one_poll_interval_of_the_timeout(session, waits):
    outcome = waits.wait_until(session, "visible", Locator.css("#never-appears"), timeout=3)

    assert outcome.status is WaitStatus.TIMEOUT
    assert not outcome
    assert 3.0 <= outcome.elapsed < 3.5
    assert outcome.elapsed < 3.0 + waits.poll_interval


@pytest.mark.parametrize("poll_interval", [0.1, 0.25, 0.4, 0.7])
def test_timeout_bounds_hold_for_any_poll_interval(session, clock, poll_interval):
    waits = WaitEngine(poll_interval=poll_interval, clock=clock.monotonic, sleep=clock.sleep)

    outcome = waits.wait_until(session, visible, Locator.id("missing"), timeout=2)

    assert outcome.status is WaitStatus.TIMEOUT
    assert 2.0 <= outcome.elapsed < 2.0 + poll_interval


def test_satisfied_on_first_probe_does_not_sleep(page, session, waits, clock):
    page.add("css=#email", FakeElement())

    outcome = waits.wait_until(session, visible, Locator.css("#email"))

    assert outcome.ready
    assert outcome.elapsed == 0
    assert clock.sleeps == []


def test_zero_timeout_probes_exactly_once(session, waits, clock):
    outcome = waits.wait_until(session, visible, Locator.css("#late"), timeout=0)

    assert outcome.status is WaitStatus.TIMEOUT
    assert clock.sleeps == []


def test_require_raises_wait_timeout_with_locator_and_elapsed(session, waits):
    locator = Locator.css("#never-appears")

    with pytest.raises(WaitTimeoutError) as exc_info:
        waits.wait_until(session, visible, locator, timeout=1, require=True)

    assert exc_info.value.locator == locator
    assert exc_info.value.elapsed >= 1.0
    assert "css=#never-appears" in str(exc_info.value)


def test_closed_page_yields_invalid_session(page, session, waits, clock):
    page.closed = True

    outcome = waits.wait_until(session, visible, Locator.css("#email"), timeout=5)

    assert outcome.status is WaitStatus.INVALID_SESSION
    assert clock.sleeps == []
    with pytest.raises(InvalidSessionError):
        outcome.require()


def test_released_session_is_invalid(session, waits):
    session.close()

    outcome = waits.wait_until(session, visible, Locator.css("#email"), timeout=5)

    assert outcome.status is WaitStatus.INVALID_SESSION


def test_hidden_zero_size_and_disabled_elements_are_not_interactable(page, session, waits):
    page.add("css=.btn", FakeElement(visible=False))
    page.add("css=.btn", FakeElement(size=(0, 0)))
    page.add("css=.btn", FakeElement(enabled=False))
    page.add("css=.btn", FakeElement(obscured=True))

    outcome = waits.wait_until(session, interactable, Locator.css(".btn"), timeout=1)

    assert outcome.status is WaitStatus.TIMEOUT


def test_visible_ignores_enabled_and_obscured_state(page, session, waits):
    element = page.add("css=.btn", FakeElement(enabled=False, obscured=True))

    outcome = waits.wait_until(session, visible, Locator.css(".btn"), timeout=1)

    assert outcome.element is element


def test_absent_waits_for_spinner_to_disappear(page, session, waits):
    page.add("css=.spinner", FakeElement(), disappears_at=1.5)

    outcome = waits.wait_until(session, absent, Locator.css(".spinner"), timeout=5)

    assert outcome.ready
    assert 1.5 <= outcome.elapsed < 1.75


def test_absent_is_satisfied_by_hidden_matches(page, session, waits):
    page.add("css=.modal", FakeElement(visible=False))

    assert waits.wait_for_absent(session, Locator.css(".modal"), timeout=0)


def test_visible_with_text_skips_empty_banners(page, session, waits):
    page.add("css=.error-message", FakeElement(text="   "))
    alert = page.add("css=[id=\"alertMessage\"]", FakeElement(text="Invalid credentials"), appears_at=0.5)
    errors = Locator.any_of(Locator.css(".error-message"), Locator.id("alertMessage"))

    outcome = waits.wait_until(session, "visible_with_text", errors, timeout=2)

    assert outcome.element is alert
    assert outcome.elapsed == 0.5


def test_wait_for_visible_returns_element(page, session, waits):
    element = page.add("css=[data-testid=\"avatar\"]", FakeElement())

    assert waits.wait_for_visible(session, Locator.test_id("avatar")) is element


def test_is_present_does_not_wait(page, session, waits, clock):
    assert waits.is_present(session, Locator.css("#late")) is False
    assert clock.now == 0


def test_wait_for_url_is_case_insensitive(page, session, waits):
    page.url = "http://localhost:3000/Dashboard.html"

    assert waits.wait_for_url(session, "dashboard", timeout=0)
    assert not waits.wait_for_url(session, "settings", timeout=0.5)


def test_probe_errors_count_as_not_satisfied(page, session, waits):
    class Detached(FakeElement):
        def is_visible(self):
            raise PlaywrightError("Element is not attached to the DOM")

    page.add("css=#flaky", Detached())

    outcome = waits.wait_until(session, visible, Locator.css("#flaky"), timeout=0.5)

    assert outcome.status is WaitStatus.TIMEOUT


def test_unknown_predicate_name_is_rejected(session, waits):
    with pytest.raises(ValueError):
        waits.wait_until(session, "clickable", Locator.css("#x"))


def test_poll_interval_must_be_positive():
    with pytest.raises(ValueError):
        WaitEngine(poll_interval=0)
