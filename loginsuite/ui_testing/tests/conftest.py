"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for session
management, the wait/interaction engines, page objects, and reporting hooks.

Key Features:
- Session registry shared by the run, one browser session per worker/thread
- Engine and Page Object fixtures
- Lifecycle reporting (screenshots, evidence bundles, log snapshots)
- Per-test log context

================================================================================
"""

from typing import Generator

import pytest
from loguru import logger

from harness_tools.common import init_logger
from harness_tools.report_tools.allure_utils import AllureEvidenceSink
from loginsuite.ui_testing.framework.config_loader import ConfigLoader
from loginsuite.ui_testing.framework.credentials import CredentialProvider
from loginsuite.ui_testing.framework.element_actions import ElementActions
from loginsuite.ui_testing.framework.evidence import EvidenceCapture
from loginsuite.ui_testing.framework.lifecycle import TestLifecycle
from loginsuite.ui_testing.framework.session_registry import (
    Session,
    SessionRegistry,
    SessionSettings,
)
from loginsuite.ui_testing.framework.wait_engine import WaitEngine
from loginsuite.ui_testing.pages.login_page import LoginPage


LIFECYCLE_KEY = pytest.StashKey[TestLifecycle]()


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config):
    """Initialize logging and the reporting lifecycle for the run."""
    settings = ConfigLoader()
    log_dir = settings.get("logging.dir", "logs")
    init_logger(
        level=settings.get("logging.level", "INFO"),
        log_dir=log_dir,
        rotation=settings.get("logging.rotation", "10 MB"),
        retention=settings.get("logging.retention", "7 days"),
    )
    config.stash[LIFECYCLE_KEY] = TestLifecycle(
        EvidenceCapture(AllureEvidenceSink()),
        log_dir=log_dir,
    )


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> ConfigLoader:
    return ConfigLoader()


@pytest.fixture(scope="session")
def session_settings(ui_config: ConfigLoader) -> SessionSettings:
    settings = SessionSettings.from_config(ui_config)
    logger.info(
        f"Session settings: browser={settings.browser}, headless={settings.headless}, "
        f"default_wait={settings.default_wait_timeout}s"
    )
    return settings


@pytest.fixture(scope="session")
def credentials(ui_config: ConfigLoader) -> CredentialProvider:
    return CredentialProvider(ui_config)


@pytest.fixture(scope="session")
def base_url(ui_config: ConfigLoader) -> str:
    return ui_config.get("ui.base_url", "http://localhost:3000")


# ================================================================================
# Session Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def registry(session_settings: SessionSettings) -> Generator[SessionRegistry, None, None]:
    """
    Session-scoped registry.

    Owns every browser session of this worker; anything left open is closed
    when the run ends.
    """
    registry = SessionRegistry(session_settings)
    yield registry
    registry.release_all()


@pytest.fixture(scope="function")
def session(registry: SessionRegistry) -> Generator[Session, None, None]:
    """
    Function-scoped browser session.

    Acquired for the current execution context and released after the test,
    giving each test a fresh browser.
    """
    session = registry.acquire()
    yield session
    registry.release(session.context_key)


# ================================================================================
# Engine Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def evidence() -> EvidenceCapture:
    return EvidenceCapture(AllureEvidenceSink())


@pytest.fixture(scope="session")
def waits(session_settings: SessionSettings) -> WaitEngine:
    return WaitEngine.from_settings(session_settings)


@pytest.fixture(scope="session")
def actions(session_settings: SessionSettings, evidence: EvidenceCapture) -> ElementActions:
    return ElementActions.from_settings(session_settings, evidence)


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(
    session: Session,
    actions: ElementActions,
    base_url: str,
    ui_config: ConfigLoader,
) -> LoginPage:
    """
    Provides LoginPage instance.

    Use this fixture for tests that interact with the login page.
    """
    return LoginPage(session, actions, base_url, login_path=ui_config.get("ui.login_path"))


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.fixture(autouse=True)
def _test_log_context(request) -> Generator[None, None, None]:
    """Bind the test name to every log line and log the START banner."""
    with logger.contextualize(test=request.node.name):
        request.config.stash[LIFECYCLE_KEY].on_test_start(request.node.nodeid)
        yield


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Report each test outcome through the lifecycle.

    Failures attach a screenshot, an evidence bundle and the run log; passes
    attach a screenshot and the log tail.
    """
    outcome = yield
    report = outcome.get_result()

    lifecycle = item.config.stash.get(LIFECYCLE_KEY, None)
    if lifecycle is None:
        return

    session = getattr(item, "funcargs", {}).get("session")

    if report.skipped:
        reason = report.longrepr[2] if isinstance(report.longrepr, tuple) else ""
        lifecycle.on_test_skipped(item.nodeid, reason)
    elif report.when == "call" and report.failed:
        lifecycle.on_test_failure(item.nodeid, session, report.longreprtext)
    elif report.when == "call" and report.passed:
        lifecycle.on_test_success(item.nodeid, session)
