"""
================================================================================
Harness Tools
================================================================================

Infrastructure utilities shared by the test suites.

Modules:
    - common: Logging setup and run-log helpers
    - report_tools: Allure attachment helpers and evidence sink

Example:
    from harness_tools.common import init_logger
    from harness_tools.report_tools.allure_utils import AllureEvidenceSink

    init_logger(level="INFO", log_dir="logs")
    sink = AllureEvidenceSink()

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
