"""LxmlDocument: a Document backed by static HTML.

Pages are fetched with httpx and parsed with lxml. There is no JavaScript,
so a page is fully ready as soon as it is parsed and waiting for an element
is a plain query. Activating the next-page control follows its ``href``.

This is the lightweight alternative to PlaywrightDocument for pages that
render server-side, and it is what the test suite runs against.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urljoin

import httpx
from cssselect import SelectorError
from lxml import etree, html
from lxml.html import HtmlElement

from fugotcha.common.exceptions import (
    AdvanceFailed,
    NavigationTimeout,
    PageLoadFailed,
    ScraperAssumptionException,
)
from fugotcha.common.locator import Locator

logger = logging.getLogger(__name__)

# lxml returns text and attribute XPath results as str subclasses.
LxmlResult = HtmlElement | str


class LxmlDocument:
    """Document implementation over httpx and lxml.

    Args:
        client: httpx client to fetch pages with. If omitted, one is created
            and closed by ``close()``.
        timeout: Request timeout in seconds for a created client.

    Example::

        with LxmlDocument.open() as document:
            document.goto("https://www.dischord.com/fugazi_live_series/p1")
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout, follow_redirects=True
        )
        self._url = ""
        self._tree: HtmlElement | None = None

    @classmethod
    @contextmanager
    def open(cls, **kwargs: Any) -> Iterator[LxmlDocument]:
        """Create a document and close its HTTP client on exit."""
        document = cls(**kwargs)
        try:
            yield document
        finally:
            document.close()

    def close(self) -> None:
        """Close the HTTP client if this document created it."""
        if self._owns_client:
            self._client.close()

    @property
    def url(self) -> str:
        return self._url

    def goto(self, url: str) -> int:
        """Fetch and parse ``url``.

        Raises:
            NavigationTimeout: If the request times out.
            PageLoadFailed: On a transport error, a non-2xx status or an
                empty body.
        """
        logger.debug(f"GET {url}")
        try:
            response = self._client.get(url)
        except httpx.TimeoutException as e:
            timeout_ms = self.timeout * 1000 if self.timeout else None
            raise NavigationTimeout(url, timeout_ms) from e
        except httpx.HTTPError as e:
            raise PageLoadFailed(url, None, reason=str(e)) from e

        if not response.is_success:
            raise PageLoadFailed(url, response.status_code)

        if not response.content.strip():
            raise PageLoadFailed(
                url, response.status_code, reason="empty document"
            )

        # Bytes, so an <?xml encoding=...?> declaration is accepted
        parser = html.HTMLParser(encoding=response.encoding or "utf-8")
        try:
            self._tree = html.fromstring(response.content, parser=parser)
        except (etree.ParserError, ValueError) as e:
            raise PageLoadFailed(
                url, response.status_code, reason=f"unparseable HTML: {e}"
            ) from e

        self._url = str(response.url)
        return response.status_code

    def wait_for_element(
        self, locator: Locator, required: bool = False
    ) -> LxmlResult | None:
        """Return the first match for the locator's own selector.

        Static pages never time out, so ``required`` has no effect here;
        a missing element is reported by the caller.
        """
        return self.query_one(None, locator)

    def query_one(
        self, scope: LxmlResult | None, locator: Locator
    ) -> LxmlResult | None:
        results = self._select(scope, locator)
        return results[0] if results else None

    def query_all(
        self, scope: LxmlResult | None, locator: Locator
    ) -> list[LxmlResult]:
        return self._select(scope, locator)

    def text_of(self, element: LxmlResult) -> str:
        if isinstance(element, str):
            return element.strip()
        return element.text_content().strip()

    def activate(self, locator: Locator) -> bool:
        """Follow the link matched by ``locator``.

        Returns:
            False if nothing matched, True once the linked page is loaded.

        Raises:
            AdvanceFailed: If the control has no href or the linked page
                fails to load.
        """
        control: LxmlResult | None
        if locator.scope is not None:
            container = self.query_one(None, locator.scope)
            control = (
                self.query_one(container, locator)
                if container is not None
                else None
            )
        else:
            control = self.query_one(None, locator)
        if control is None:
            return False

        source = self._url
        href = control if isinstance(control, str) else control.get("href")
        if not href:
            raise AdvanceFailed(str(locator), source, "control has no href")

        try:
            self.goto(urljoin(source, href))
        except PageLoadFailed as e:
            raise AdvanceFailed(str(locator), source, e.message) from e
        return True

    def _root(self) -> HtmlElement:
        if self._tree is None:
            raise RuntimeError("No page loaded; call goto() first")
        return self._tree

    def _select(
        self, scope: LxmlResult | None, locator: Locator
    ) -> list[LxmlResult]:
        element = self._root() if scope is None else scope
        if isinstance(element, str):
            # Text results have no children
            return []

        if locator.selector_type == "css":
            try:
                return list(element.cssselect(locator.selector))
            except SelectorError as e:
                raise ScraperAssumptionException(
                    f"Invalid CSS selector for '{locator.description}'",
                    self._url,
                    {"selector": locator.selector, "error": str(e)},
                ) from e

        try:
            results = element.xpath(locator.selector)
        except etree.XPathError as e:
            raise ScraperAssumptionException(
                f"Invalid XPath for '{locator.description}'",
                self._url,
                {"selector": locator.selector, "error": str(e)},
            ) from e
        if not isinstance(results, list):
            # Scalar XPath results (count(), string()) are not elements
            return [str(results)]
        return [r for r in results if isinstance(r, (HtmlElement, str))]
