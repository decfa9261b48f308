"""
Unit test fixtures: fake Playwright objects wired into real engines.
"""

import pytest

from loginsuite.ui_testing.framework.config_loader import ConfigLoader
from loginsuite.ui_testing.framework.element_actions import ElementActions
from loginsuite.ui_testing.framework.evidence import EvidenceCapture
from loginsuite.ui_testing.framework.session_registry import Session, SessionSettings
from loginsuite.ui_testing.framework.wait_engine import WaitEngine

from .fakes import CollectingSink, FakeClock, FakeContext, FakePage


# ================================================================================
# Fixtures
# ================================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def page(clock: FakeClock) -> FakePage:
    return FakePage(clock)


@pytest.fixture
def browser_context() -> FakeContext:
    return FakeContext(cookies=[{"name": "sid", "value": "s3cr3t-session", "domain": "localhost", "path": "/"}])


@pytest.fixture
def session(page: FakePage, browser_context: FakeContext) -> Session:
    return Session(
        context_key="main:MainThread",
        page=page,
        settings=SessionSettings(browser="chrome", headless=True),
        browser_context=browser_context,
    )


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def evidence(sink: CollectingSink) -> EvidenceCapture:
    return EvidenceCapture(sink)


@pytest.fixture
def waits(clock: FakeClock) -> WaitEngine:
    return WaitEngine(default_timeout=10.0, poll_interval=0.25, clock=clock.monotonic, sleep=clock.sleep)


@pytest.fixture
def actions(waits: WaitEngine, evidence: EvidenceCapture) -> ElementActions:
    return ElementActions(waits, evidence)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Each test starts without a cached ConfigLoader."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
