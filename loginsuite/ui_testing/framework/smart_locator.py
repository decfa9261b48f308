"""
================================================================================
Smart Locator - Ordered Marker Chains
================================================================================

Resolves a UI state from an ordered list of markers, first satisfied wins.

Each marker is either a locator polled with a predicate (via the wait engine)
or a heuristic evaluated once against the session (e.g. a URL check). The
chain walks the markers in declaration order and stops at the first one that
holds. No priority beyond the order is implied.

Features:
    - Explicit, ordered fallback markers (data, not nested handlers)
    - Per-marker timeouts (long for slow transitions, short for negatives)
    - Usage analytics: which markers needed a fallback

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from .fallback import FallbackChain, Strategy
from .locators import Target
from .wait_engine import WaitEngine


@dataclass(frozen=True)
class Marker:
    """
    One entry of a marker chain.

    Attributes:
        name: Human-readable marker name
        target: Locator polled with `predicate` (None for heuristics)
        predicate: Predicate name or callable for the wait engine
        timeout: Seconds to wait for this marker (None = engine default)
        check: Heuristic evaluated once against the session instead of a wait
    """

    name: str
    target: Optional[Target] = None
    predicate: Any = "visible"
    timeout: Optional[float] = None
    check: Optional[Callable[[Any], bool]] = None

    @classmethod
    def heuristic(cls, name: str, check: Callable[[Any], bool]) -> "Marker":
        return cls(name=name, check=check)

    def __post_init__(self) -> None:
        if (self.target is None) == (self.check is None):
            raise ValueError(f"Marker '{self.name}' needs exactly one of target or check")


@dataclass
class LocatorHealth:
    """
    Tracks which marker satisfied a chain.

    Attributes:
        chain_name: Human-readable chain name
        primary_marker: The preferred (first) marker
        used_fallback: Whether a later marker was used
        fallback_name: Name of the marker used (if fallback)
    """

    chain_name: str
    primary_marker: str
    used_fallback: bool = False
    fallback_name: Optional[str] = None


class SmartLocator:
    """
    Evaluates ordered marker chains against a session.

    Usage:
        >>> smart = SmartLocator(waits)
        >>> logged_in = smart.first_satisfied(session, "logged_in", [
        ...     Marker("dashboard icon", Locator.css(".bi-grid-fill"), timeout=15),
        ...     Marker("avatar", Locator.css(".user-avatar"), timeout=15),
        ...     Marker.heuristic("dashboard url", lambda s: "dashboard" in s.url),
        ... ])
        >>> logged_in.name if logged_in else None
        'dashboard icon'
    """

    def __init__(self, waits: WaitEngine) -> None:
        self.waits = waits
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    def _strategy(self, session: Any, marker: Marker) -> Strategy:
        if marker.check is not None:
            return marker.name, lambda: bool(marker.check(session))
        return marker.name, lambda: self.waits.wait_until(
            session, marker.predicate, marker.target, marker.timeout
        ).ready

    def first_satisfied(
        self,
        session: Any,
        chain_name: str,
        markers: Sequence[Marker],
    ) -> Optional[Marker]:
        """
        Return the first marker that holds, or None when none does.

        Markers raising an error count as not satisfied.
        """
        if not markers:
            raise ValueError(f"No markers defined for chain: {chain_name}")

        by_name = {m.name: m for m in markers}
        result = FallbackChain(
            [self._strategy(session, m) for m in markers],
            accept=bool,
            label=chain_name,
        ).run()

        if not result.succeeded:
            logger.info(f"Chain '{chain_name}': no marker satisfied")
            return None

        winner = by_name[result.winner.strategy]
        primary = markers[0].name
        health = LocatorHealth(
            chain_name=chain_name,
            primary_marker=primary,
            used_fallback=winner.name != primary,
            fallback_name=winner.name if winner.name != primary else None,
        )
        self._health_records.append(health)

        if health.used_fallback:
            logger.warning(f"Chain '{chain_name}' used fallback marker: {winner.name}")
            self._fallback_used[chain_name] = health
        else:
            logger.debug(f"Chain '{chain_name}' satisfied by primary marker: {primary}")
        return winner

    @property
    def health_records(self) -> List[LocatorHealth]:
        return list(self._health_records)

    def get_health_report(self) -> str:
        """
        Generate marker health report.

        Lists chains that needed a fallback marker (maintenance candidates).
        """
        if not self._fallback_used:
            return "All chains used primary markers. No maintenance needed."

        report_lines = [
            "Locator Health Report - Fallbacks Used:",
            "",
        ]
        for chain_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{chain_name}]",
                f"    Primary not satisfied: {health.primary_marker}",
                f"    Used: {health.fallback_name}",
                "",
            ])
        return "\n".join(report_lines)


__all__ = [
    "LocatorHealth",
    "Marker",
    "SmartLocator",
]
