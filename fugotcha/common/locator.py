"""Locator value objects.

A Locator is a plain description of a query against a rendered page. The
core never interprets it; a Document implementation resolves it, using lxml
for static HTML or Playwright for a live browser page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SelectorType = Literal["css", "xpath"]


@dataclass(frozen=True)
class Locator:
    """Describes how to find zero or more elements on a page.

    Attributes:
        selector: CSS selector or XPath expression.
        description: Human-readable description of what's being selected.
        selector_type: "css" or "xpath".
        scope: Optional container locator. The document waits for the scope
            element to appear and resolves ``selector`` inside it.
    """

    selector: str
    description: str
    selector_type: SelectorType = "css"
    scope: Locator | None = None

    @classmethod
    def css(
        cls, selector: str, description: str, scope: Locator | None = None
    ) -> Locator:
        return cls(selector, description, "css", scope)

    @classmethod
    def xpath(
        cls, selector: str, description: str, scope: Locator | None = None
    ) -> Locator:
        return cls(selector, description, "xpath", scope)

    def __str__(self) -> str:
        if self.scope is not None:
            return f"{self.scope} >> {self.selector_type}={self.selector}"
        return f"{self.selector_type}={self.selector}"
