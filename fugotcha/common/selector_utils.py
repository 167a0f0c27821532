"""Selector utility functions for driver integration.

These helpers translate a Locator into the selector syntax Playwright
understands and decide whether Playwright can wait on it.
"""

from __future__ import annotations

from fugotcha.common.locator import Locator

# Common EXSLT namespaces: re, str, math, set, dyn, exsl, func, date
_EXSLT_PREFIXES = (
    "re:",
    "str:",
    "math:",
    "set:",
    "dyn:",
    "exsl:",
    "func:",
    "date:",
)


def can_playwright_wait(locator: Locator) -> bool:
    """Determine if a locator can be used with Playwright's wait_for_selector().

    Playwright only waits on selectors that target elements. XPath
    expressions that return text nodes or attributes, or that use EXSLT
    functions, are rejected.

    Args:
        locator: The locator to check.

    Returns:
        True if Playwright can wait for this locator, False otherwise.

    Examples:
        >>> can_playwright_wait(Locator.css("div.content", "content"))
        True
        >>> can_playwright_wait(Locator.xpath("//div/@href", "href"))
        False
        >>> can_playwright_wait(Locator.xpath("//div/text()", "text"))
        False
    """
    if locator.selector_type == "css":
        return True

    selector = locator.selector.strip()

    if selector.endswith("/text()"):
        return False

    # Attribute selection ends with /@name
    if "/@" in selector:
        parts = selector.split("/")
        if parts and parts[-1].startswith("@"):
            return False

    return all(prefix not in selector for prefix in _EXSLT_PREFIXES)


def playwright_selector(locator: Locator) -> str:
    """Render a locator's own selector in Playwright's engine syntax.

    The scope is not included; callers resolve the scope element first and
    query relative to it.

    Examples:
        >>> playwright_selector(Locator.css("#nextButton a", "next"))
        'css=#nextButton a'
        >>> playwright_selector(Locator.xpath(".//li", "items"))
        'xpath=.//li'
    """
    return f"{locator.selector_type}={locator.selector}"
