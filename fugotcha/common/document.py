"""Document protocol for the browsing collaborator.

The extraction pipeline never touches a browser or an HTML tree directly.
It goes through this small interface: navigate, wait for an element, query
inside a scope, read text, and activate a control. Two implementations
exist: LxmlDocument (static HTML fetched with httpx) and PlaywrightDocument
(a live browser page).

Element handles are opaque to the core; they are only ever passed back to
the document that produced them.
"""

from __future__ import annotations

from typing import Any, Protocol

from fugotcha.common.locator import Locator

# Opaque element handle (an lxml element or a Playwright ElementHandle).
Element = Any


class Document(Protocol):
    """Protocol for a navigable, queryable rendered page.

    All calls block on the caller's thread. Timeouts are governed by the
    implementation's own defaults.
    """

    @property
    def url(self) -> str:
        """The URL of the page currently loaded."""
        ...

    def goto(self, url: str) -> int:
        """Navigate to ``url`` and wait for it to load.

        Args:
            url: Absolute URL to load.

        Returns:
            The HTTP status code of the response.

        Raises:
            PageLoadFailed: If the status is not 2xx.
            NavigationTimeout: If the load times out.
        """
        ...

    def wait_for_element(
        self, locator: Locator, required: bool = False
    ) -> Element | None:
        """Wait for the first element matching ``locator`` to be attached.

        Only the locator's own selector is waited on; its scope, if any, is
        ignored here.

        Args:
            locator: The element to wait for.
            required: If True a timeout raises SelectorTimeout, otherwise
                the wait gives up and returns None.

        Returns:
            The element, or None if it never appeared.
        """
        ...

    def query_one(self, scope: Element | None, locator: Locator) -> Element | None:
        """Return the first match for ``locator`` inside ``scope``.

        Args:
            scope: Element to search within, or None for the whole page.
            locator: Locator whose own selector is resolved.

        Returns:
            The first matching element, or None.
        """
        ...

    def query_all(self, scope: Element | None, locator: Locator) -> list[Element]:
        """Return every match for ``locator`` inside ``scope`` in document order."""
        ...

    def text_of(self, element: Element) -> str:
        """Return the element's visible text with surrounding whitespace trimmed."""
        ...

    def activate(self, locator: Locator) -> bool:
        """Click the element matching ``locator`` and wait for navigation.

        Returns:
            True if the page navigated, False if no element matched.

        Raises:
            AdvanceFailed: If the element exists but activating it failed.
        """
        ...
