"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework with resilient interactions.

Components:
    - session_registry: One browser session per execution context
    - wait_engine: Explicit polling waits with predicates
    - element_actions: Resolve / execute / fallback interactions
    - evidence: Failure evidence bundles with redaction
    - smart_locator: Ordered marker chains with health tracking
    - page_base: Base page object for common operations
    - lifecycle: Per-test reporting hooks

Author: Automation Team
License: MIT
================================================================================
"""

from .config_loader import ConfigLoader, ConfigurationError
from .credentials import CredentialProvider
from .element_actions import ElementActions
from .evidence import EvidenceBundle, EvidenceCapture
from .exceptions import (
    ElementNotReadyError,
    HarnessError,
    InteractionFailedError,
    InvalidSessionError,
    SessionCreationError,
    WaitTimeoutError,
)
from .fallback import FallbackChain
from .lifecycle import TestLifecycle
from .locators import Locator, LocatorGroup
from .page_base import BasePage
from .session_registry import Session, SessionRegistry, SessionSettings
from .session_state import restore_cookies, restore_storage
from .smart_locator import Marker, SmartLocator
from .wait_engine import WaitEngine, WaitOutcome, WaitStatus

__all__ = [
    "BasePage",
    "ConfigLoader",
    "ConfigurationError",
    "CredentialProvider",
    "ElementActions",
    "ElementNotReadyError",
    "EvidenceBundle",
    "EvidenceCapture",
    "FallbackChain",
    "HarnessError",
    "InteractionFailedError",
    "InvalidSessionError",
    "Locator",
    "LocatorGroup",
    "Marker",
    "Session",
    "SessionCreationError",
    "SessionRegistry",
    "SessionSettings",
    "SmartLocator",
    "TestLifecycle",
    "WaitEngine",
    "WaitOutcome",
    "WaitStatus",
    "WaitTimeoutError",
    "restore_cookies",
    "restore_storage",
]
