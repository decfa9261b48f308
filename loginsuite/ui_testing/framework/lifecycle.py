"""
================================================================================
Test Lifecycle
================================================================================

Per-test reporting hooks driven by pytest:

    - start:   log a START banner
    - success: success screenshot + tail of the run log
    - failure: failure screenshot, evidence bundle, full run log snapshot
    - skipped: log the reason + tail of the run log

Every attachment is best effort; the lifecycle never turns a report into an
error of its own.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from harness_tools.common import latest_log_file, read_log_tail

from .evidence import EvidenceBundle, EvidenceCapture


SUCCESS_TAIL_LINES = 200


class TestLifecycle:
    """
    Reporting hooks for test start / success / failure / skip.

    Example:
        lifecycle = TestLifecycle(EvidenceCapture(AllureEvidenceSink()), log_dir="logs")
        lifecycle.on_test_start("test_valid_login")
        lifecycle.on_test_failure("test_valid_login", session, error)
    """

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        evidence: EvidenceCapture,
        log_dir: str = "logs",
        tail_lines: int = SUCCESS_TAIL_LINES,
    ):
        self.evidence = evidence
        self.log_dir = log_dir
        self.tail_lines = tail_lines

    @property
    def sink(self):
        return self.evidence.sink

    def on_test_start(self, test_name: str) -> None:
        logger.info(f"=== START TEST: {test_name} ===")

    def on_test_success(self, test_name: str, session: Any = None) -> None:
        logger.info(f"=== TEST PASSED: {test_name} ===")
        if session is not None:
            self.evidence.snapshot(session, f"Success - {test_name} - {datetime.now():%Y-%m-%d %H:%M:%S}")
        self._attach_log(f"Success test logs - {test_name}", tail=self.tail_lines)

    def on_test_failure(
        self,
        test_name: str,
        session: Any = None,
        error: Optional[str] = None,
    ) -> Optional[EvidenceBundle]:
        """
        Report a failed test.

        Returns:
            The evidence bundle, or None when the test had no session
        """
        logger.error(f"=== TEST FAILED: {test_name} ===")
        if error:
            logger.error(f"Failure reason: {error}")

        bundle = None
        if session is not None:
            bundle = self.evidence.capture_failure(session, f"Failure - {test_name}")
        else:
            logger.warning(f"No browser session for '{test_name}'; skipping screenshot")
        self._attach_log(f"Failure logs - {test_name}")
        return bundle

    def on_test_skipped(self, test_name: str, reason: str = "") -> None:
        logger.warning(f"=== TEST SKIPPED: {test_name} ===" + (f" ({reason})" if reason else ""))
        self._attach_log(f"Skipped test logs - {test_name}", tail=self.tail_lines)

    def _attach_log(self, name: str, tail: Optional[int] = None) -> None:
        if self.sink is None:
            return
        try:
            latest: Optional[Path] = latest_log_file(self.log_dir)
            if latest is None:
                logger.warning(f"No log file found to attach in {self.log_dir}")
                return
            if tail:
                content = read_log_tail(latest, tail)
                title = f"{name} (tail {tail} lines from {latest.name})"
            else:
                content = latest.read_text(encoding="utf-8", errors="replace")
                title = f"{name} ({latest.name})"
            self.sink.add_attachment(title, "text/plain", content.encode("utf-8"), "log")
            logger.debug(f"Attached log snapshot: {title}")
        except Exception as e:
            logger.warning(f"Failed to attach log snapshot '{name}': {e}")


__all__ = ["TestLifecycle"]
