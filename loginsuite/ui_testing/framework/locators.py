"""
================================================================================
Locators
================================================================================

Immutable, serializable descriptions of how to find elements in the current
document. A Locator is a pure value (strategy tag + selector string); it is
translated into a Playwright selector only when the page is queried.

Usage:
    >>> email = Locator.id("email")
    >>> errors = Locator.any_of(Locator.css(".error-message"), Locator.id("alertMessage"))
    >>> find_all(page, errors)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union


class By:
    """Supported locator strategy tags."""

    CSS = "css"
    ID = "id"
    XPATH = "xpath"
    NAME = "name"
    TEXT = "text"
    TEST_ID = "test_id"

    ALL = (CSS, ID, XPATH, NAME, TEXT, TEST_ID)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Locator:
    """
    Strategy + selector pair identifying zero or more DOM nodes.

    Attributes:
        strategy: One of `By.ALL`
        selector: Selector string interpreted by the strategy
    """

    strategy: str
    selector: str

    def __post_init__(self) -> None:
        if self.strategy not in By.ALL:
            raise ValueError(f"Unknown locator strategy: {self.strategy}")

    # -- constructors ---------------------------------------------------------

    @classmethod
    def css(cls, selector: str) -> "Locator":
        return cls(By.CSS, selector)

    @classmethod
    def id(cls, element_id: str) -> "Locator":
        return cls(By.ID, element_id)

    @classmethod
    def xpath(cls, expression: str) -> "Locator":
        return cls(By.XPATH, expression)

    @classmethod
    def name(cls, name: str) -> "Locator":
        return cls(By.NAME, name)

    @classmethod
    def text(cls, text: str) -> "Locator":
        return cls(By.TEXT, text)

    @classmethod
    def test_id(cls, test_id: str) -> "Locator":
        return cls(By.TEST_ID, test_id)

    @staticmethod
    def any_of(*locators: "Locator") -> "LocatorGroup":
        return LocatorGroup(tuple(locators))

    # -- translation ----------------------------------------------------------

    def to_selector(self) -> str:
        """Translate to a Playwright selector string."""
        if self.strategy == By.CSS:
            return f"css={self.selector}"
        if self.strategy == By.ID:
            return f"css=[id={_quote(self.selector)}]"
        if self.strategy == By.XPATH:
            return f"xpath={self.selector}"
        if self.strategy == By.NAME:
            return f"css=[name={_quote(self.selector)}]"
        if self.strategy == By.TEXT:
            return f"text={self.selector}"
        return f"css=[data-testid={_quote(self.selector)}]"

    # -- serialization --------------------------------------------------------

    def to_dict(self) -> Dict[str, str]:
        return {"strategy": self.strategy, "selector": self.selector}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Locator":
        return cls(data["strategy"], data["selector"])

    @property
    def members(self) -> Tuple["Locator", ...]:
        return (self,)

    def __str__(self) -> str:
        return f"{self.strategy}={self.selector}"


@dataclass(frozen=True)
class LocatorGroup:
    """Ordered union of locators; resolves to all members' matches in order."""

    members: Tuple[Locator, ...]

    def __post_init__(self) -> None:
        if not self.members:
            raise ValueError("LocatorGroup needs at least one locator")

    def to_dict(self) -> Dict[str, Any]:
        return {"any_of": [m.to_dict() for m in self.members]}

    def __str__(self) -> str:
        return " | ".join(str(m) for m in self.members)


Target = Union[Locator, LocatorGroup]


def find_all(page: Any, target: Target) -> List[Any]:
    """
    Query every element matching a locator or locator group.

    Never waits: an empty list means nothing matches right now.
    """
    elements: List[Any] = []
    for locator in target.members:
        elements.extend(page.query_selector_all(locator.to_selector()))
    return elements


__all__ = [
    "By",
    "Locator",
    "LocatorGroup",
    "Target",
    "find_all",
]
