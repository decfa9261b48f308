"""
================================================================================
Harness Tools Common Utilities
================================================================================

Shared logging setup for the harness.

Exports:
    - init_logger: Configure loguru console + per-run file sinks
    - latest_log_file: Most recent per-run log file
    - read_log_tail: Last N lines of a log file

Usage:
    from harness_tools.common import init_logger, latest_log_file

    log_file = init_logger(level="DEBUG", log_dir="logs")

================================================================================
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger


# Per-run log files are named test-run-<timestamp>.log
LOG_FILE_PREFIX = "test-run-"
LOG_FILE_SUFFIX = ".log"

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[test]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[test]} | "
    "{name}:{function}:{line} | {message}"
)

_logger_initialized = False
_log_file: Optional[Path] = None


def init_logger(
    level: str = None,
    log_dir: str = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> Optional[Path]:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL or INFO.
        log_dir: Directory for the per-run log file. No file sink when None.
        rotation: Loguru rotation policy for the file sink
        retention: Loguru retention policy for the file sink

    Returns:
        Path pattern of the per-run log file, or None
    """
    global _logger_initialized, _log_file

    if _logger_initialized:
        return _log_file

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    logger.configure(extra={"test": "-"})
    logger.add(
        sys.stderr,
        format=DEFAULT_FORMAT,
        level=level,
        colorize=True,
    )

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        _log_file = Path(log_dir) / f"{LOG_FILE_PREFIX}{{time:YYYYMMDD_HHmmss}}{LOG_FILE_SUFFIX}"
        logger.add(
            str(_log_file),
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")
    return _log_file


def latest_log_file(log_dir: str) -> Optional[Path]:
    """Return the most recently modified per-run log file in `log_dir`."""
    directory = Path(log_dir)
    if not directory.exists():
        logger.warning(f"Log directory not found: {directory.resolve()}")
        return None

    candidates = [
        p for p in directory.iterdir()
        if p.is_file() and p.name.startswith(LOG_FILE_PREFIX) and p.name.endswith(LOG_FILE_SUFFIX)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def read_log_tail(path: Path, max_lines: int = 200) -> str:
    """Return the last `max_lines` lines of a text file."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        lines: List[str] = f.readlines()
    start = max(0, len(lines) - max(1, max_lines))
    return "".join(lines[start:])


__all__ = [
    "init_logger",
    "latest_log_file",
    "read_log_tail",
    "LOG_FILE_PREFIX",
    "LOG_FILE_SUFFIX",
]
