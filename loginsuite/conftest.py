"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the suite's markers, tags tests by directory and gates live
browser tests behind UI_LIVE=1.

================================================================================
"""

import os

import pytest


LIVE_ENV_FLAG = "UI_LIVE"


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "live: Needs a real browser and a running application (UI_LIVE=1)"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests (no browser)"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )


def _live_enabled() -> bool:
    return os.getenv(LIVE_ENV_FLAG, "").strip().lower() in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds directory markers and skips live tests unless UI_LIVE is set.
    """
    skip_live = pytest.mark.skip(reason=f"live UI test; set {LIVE_ENV_FLAG}=1 to run")
    for item in items:
        path = str(item.fspath)

        # Auto-add 'ui' marker to tests in ui_testing directory
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)

        # Auto-add 'unit' marker to tests in unit directory
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)

        if item.get_closest_marker("live") and not _live_enabled():
            item.add_marker(skip_live)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Login UI Harness",
        f"Live UI tests: {'enabled' if _live_enabled() else 'disabled'}",
        "=" * 60,
        "",
    ]
