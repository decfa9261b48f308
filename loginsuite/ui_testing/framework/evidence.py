"""
================================================================================
Evidence Capture
================================================================================

Best-effort diagnostic bundles gathered at failure boundaries.

A bundle holds whatever could be collected from the session:
    - screenshot (PNG)
    - page markup (HTML)
    - cookies, localStorage, sessionStorage (JSON, redacted)
    - console log (text)
    - metadata (JSON: url, user agent, timestamp, ...)

Every artifact is gathered independently: one failing source never prevents
the others, and nothing raised while gathering ever escapes. The finished
bundle is handed to a sink, which owns persistence.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from loguru import logger


# Storage keys whose values never leave the browser
REDACTION_PATTERN = re.compile(r"token|auth|password|secret", re.IGNORECASE)
REDACTED = "[REDACTED]"

STORAGE_SCRIPT = """
kind => {
    const store = window[kind];
    const out = {};
    for (let i = 0; i < store.length; i++) {
        const key = store.key(i);
        out[key] = store.getItem(key);
    }
    return out;
}
"""

USER_AGENT_SCRIPT = "() => navigator.userAgent"


def redact_mapping(values: Dict[str, Any]) -> Dict[str, Any]:
    """Replace the value of every sensitive key with the redaction marker."""
    return {
        key: REDACTED if REDACTION_PATTERN.search(str(key)) else value
        for key, value in values.items()
    }


def redact_cookies(cookies: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep cookie metadata, never values."""
    return [
        {
            "name": cookie.get("name", ""),
            "value": REDACTED,
            "domain": cookie.get("domain", ""),
            "path": cookie.get("path", ""),
            "secure": bool(cookie.get("secure", False)),
            "httpOnly": bool(cookie.get("httpOnly", False)),
        }
        for cookie in cookies
    ]


@dataclass(frozen=True)
class Artifact:
    """One captured piece of evidence."""

    name: str
    mime_type: str
    content: bytes
    extension: str

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class EvidenceBundle:
    """
    Immutable, timestamped set of artifacts captured for one failure.

    Attributes:
        label: What failed (test name, or locator + action)
        captured_at: Capture timestamp (UTC)
        artifacts: Artifacts that were gathered
        missing: Names of artifacts that could not be gathered
    """

    label: str
    captured_at: datetime
    artifacts: Tuple[Artifact, ...] = ()
    missing: Tuple[str, ...] = ()

    @property
    def names(self) -> List[str]:
        return [a.name for a in self.artifacts]

    def get(self, name: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


class EvidenceSink(Protocol):
    """Report collaborator receiving attachments."""

    def add_attachment(
        self,
        name: str,
        mime_type: str,
        content: bytes,
        extension: str,
    ) -> None:
        ...


def _json_bytes(data: Any) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str).encode("utf-8")


@dataclass
class _Collector:
    label: str
    artifacts: List[Artifact] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    def gather(
        self,
        name: str,
        mime_type: str,
        extension: str,
        source: Callable[[], Optional[bytes]],
    ) -> None:
        try:
            content = source()
        except Exception as e:
            logger.warning(f"Evidence '{name}' unavailable for '{self.label}': {e}")
            self.missing.append(name)
            return
        if content:
            self.artifacts.append(Artifact(name, mime_type, content, extension))


class EvidenceCapture:
    """
    Gathers evidence bundles and forwards them to a sink.

    Usage:
        capture = EvidenceCapture(sink=AllureEvidenceSink())
        bundle = capture.capture_failure(session, "test_valid_login")
        "screenshot" in bundle
    """

    def __init__(
        self,
        sink: Optional[EvidenceSink] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.sink = sink
        self._now = now

    # -------------------------------------------------------------------------
    # Artifact sources
    # -------------------------------------------------------------------------

    @staticmethod
    def _screenshot(session: Any) -> bytes:
        return session.page.screenshot(full_page=True)

    @staticmethod
    def _markup(session: Any) -> bytes:
        return session.page.content().encode("utf-8")

    @staticmethod
    def _cookies(session: Any) -> bytes:
        return _json_bytes(redact_cookies(session.browser_context.cookies()))

    @staticmethod
    def _storage(session: Any, kind: str) -> bytes:
        values = session.page.evaluate(STORAGE_SCRIPT, kind) or {}
        return _json_bytes(redact_mapping(values))

    @staticmethod
    def _console(session: Any) -> bytes:
        lines = [entry.format() for entry in session.console_entries()]
        return "\n".join(lines).encode("utf-8")

    def _metadata(self, session: Any, label: str) -> bytes:
        meta: Dict[str, Any] = {"label": label, "timestamp": self._now().isoformat()}
        try:
            meta["url"] = session.page.url
        except Exception as e:
            logger.debug(f"Metadata url unavailable: {e}")
        try:
            meta["userAgent"] = session.page.evaluate(USER_AGENT_SCRIPT) or ""
        except Exception as e:
            logger.debug(f"Metadata user agent unavailable: {e}")
        meta["contextKey"] = getattr(session, "context_key", "")
        settings = getattr(session, "settings", None)
        if settings is not None:
            meta["browser"] = settings.browser
            meta["headless"] = settings.headless
        return _json_bytes(meta)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def capture_failure(self, session: Any, label: str) -> EvidenceBundle:
        """
        Gather every available artifact and hand the bundle to the sink.

        Never raises.
        """
        collector = _Collector(label)
        if session is None:
            logger.warning(f"No session to capture evidence from for '{label}'")
        else:
            collector.gather("screenshot", "image/png", "png", lambda: self._screenshot(session))
            collector.gather("page_source", "text/html", "html", lambda: self._markup(session))
            collector.gather("cookies", "application/json", "json", lambda: self._cookies(session))
            collector.gather(
                "local_storage", "application/json", "json",
                lambda: self._storage(session, "localStorage"),
            )
            collector.gather(
                "session_storage", "application/json", "json",
                lambda: self._storage(session, "sessionStorage"),
            )
            collector.gather("console_log", "text/plain", "log", lambda: self._console(session))
            collector.gather(
                "metadata", "application/json", "json",
                lambda: self._metadata(session, label),
            )

        bundle = EvidenceBundle(
            label=label,
            captured_at=self._now(),
            artifacts=tuple(collector.artifacts),
            missing=tuple(collector.missing),
        )
        logger.info(
            f"Captured evidence for '{label}': {bundle.names}"
            + (f" (missing: {list(bundle.missing)})" if bundle.missing else "")
        )
        self.publish(bundle)
        return bundle

    def publish(self, bundle: EvidenceBundle) -> None:
        if self.sink is None:
            return
        for artifact in bundle.artifacts:
            try:
                self.sink.add_attachment(
                    f"{artifact.name} - {bundle.label}",
                    artifact.mime_type,
                    artifact.content,
                    artifact.extension,
                )
            except Exception as e:
                logger.warning(f"Evidence sink rejected '{artifact.name}': {e}")

    def snapshot(self, session: Any, name: str) -> Optional[bytes]:
        """Best-effort viewport screenshot attached under `name`."""
        try:
            image = session.page.screenshot()
        except Exception as e:
            logger.debug(f"Snapshot '{name}' skipped: {e}")
            return None
        if self.sink is not None:
            try:
                self.sink.add_attachment(name, "image/png", image, "png")
            except Exception as e:
                logger.warning(f"Evidence sink rejected snapshot '{name}': {e}")
        return image


__all__ = [
    "Artifact",
    "EvidenceBundle",
    "EvidenceCapture",
    "EvidenceSink",
    "REDACTED",
    "REDACTION_PATTERN",
    "STORAGE_SCRIPT",
    "USER_AGENT_SCRIPT",
    "redact_cookies",
    "redact_mapping",
]
