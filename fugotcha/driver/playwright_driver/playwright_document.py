"""Playwright-backed Document for JavaScript-rendered pages.

Uses Playwright's sync API so the scrape loop stays a plain blocking loop on
one thread: navigate, wait for elements, read their text, click "next" and
wait for the navigation to finish.

Key features:
- Browser lifecycle management via the ``open()`` context manager
- Playwright timeouts mapped to NavigationTimeout / SelectorTimeout
- Short waits for optional elements so absent details don't stall a page
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from playwright.sync_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    sync_playwright,
)
from playwright.sync_api import (
    Error as PlaywrightError,
)
from playwright.sync_api import (
    TimeoutError as PlaywrightTimeoutError,
)

from fugotcha.common.exceptions import (
    AdvanceFailed,
    DriverLaunchFailed,
    NavigationTimeout,
    PageLoadFailed,
    SelectorTimeout,
)
from fugotcha.common.locator import Locator
from fugotcha.common.selector_utils import (
    can_playwright_wait,
    playwright_selector,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_OPTIONAL_WAIT_MS = 2_000


class PlaywrightDocument:
    """Document implementation over a live Playwright page.

    Args:
        page: The Playwright page to drive.
        timeout_ms: Timeout for navigation and required-element waits.
        optional_wait_ms: Timeout for waits on elements that may be absent.

    Example:
        with PlaywrightDocument.open(headless=True) as document:
            document.goto("https://www.dischord.com/fugazi_live_series/p1")
    """

    def __init__(
        self,
        page: Page,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        optional_wait_ms: float = DEFAULT_OPTIONAL_WAIT_MS,
    ) -> None:
        self._page = page
        self.timeout_ms = timeout_ms
        self.optional_wait_ms = optional_wait_ms
        page.set_default_timeout(timeout_ms)
        page.set_default_navigation_timeout(timeout_ms)

    @classmethod
    @contextmanager
    def open(
        cls,
        browser_type: str = "chromium",
        headless: bool = True,
        viewport: dict[str, int] | None = None,
        user_agent: str | None = None,
        locale: str = "en-US",
        timezone_id: str = "America/New_York",
        **kwargs: Any,
    ) -> Iterator[PlaywrightDocument]:
        """Launch a browser and yield a document on a fresh page.

        The browser, its context and the Playwright runtime are closed on
        exit.

        Args:
            browser_type: "chromium", "firefox" or "webkit".
            headless: Run the browser without a window.
            viewport: Browser viewport size (default: 1280x720).
            user_agent: Custom user agent string (default: browser default).
            locale: Browser locale.
            timezone_id: Browser timezone.
            **kwargs: Passed to ``__init__`` (timeouts).

        Yields:
            Initialized PlaywrightDocument.

        Raises:
            DriverLaunchFailed: If the browser cannot be started.
        """
        if viewport is None:
            viewport = {"width": 1280, "height": 720}

        with sync_playwright() as playwright:
            browser_launcher = getattr(playwright, browser_type)
            try:
                browser: Browser = browser_launcher.launch(headless=headless)
            except PlaywrightError as e:
                raise DriverLaunchFailed(browser_type, e.message) from e
            try:
                context_kwargs: dict[str, Any] = {
                    "viewport": viewport,
                    "locale": locale,
                    "timezone_id": timezone_id,
                }
                if user_agent:
                    context_kwargs["user_agent"] = user_agent

                context: BrowserContext = browser.new_context(**context_kwargs)
                try:
                    logger.debug(
                        f"Launched {browser_type} (headless={headless})"
                    )
                    yield cls(context.new_page(), **kwargs)
                finally:
                    context.close()
            finally:
                browser.close()

    @property
    def url(self) -> str:
        return self._page.url

    def goto(self, url: str) -> int:
        """Navigate to ``url`` and wait for DOMContentLoaded.

        Raises:
            NavigationTimeout: If the navigation times out.
            PageLoadFailed: On a network error or a non-2xx status.
        """
        logger.debug(f"Navigating to {url}")
        try:
            response = self._page.goto(url, wait_until="domcontentloaded")
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(url, self.timeout_ms) from e
        except PlaywrightError as e:
            raise PageLoadFailed(url, None, reason=e.message) from e

        if response is None:
            # Same-document navigation (anchor or history API)
            return 200
        if not response.ok:
            raise PageLoadFailed(url, response.status)
        return response.status

    def wait_for_element(
        self, locator: Locator, required: bool = False
    ) -> ElementHandle | None:
        """Wait for the locator's own selector to be attached to the DOM.

        Raises:
            SelectorTimeout: If ``required`` and the element never appears.
        """
        if not can_playwright_wait(locator):
            return self.query_one(None, locator)

        timeout = self.timeout_ms if required else self.optional_wait_ms
        try:
            return self._page.wait_for_selector(
                playwright_selector(locator), state="attached", timeout=timeout
            )
        except PlaywrightTimeoutError as e:
            if required:
                logger.warning(
                    f"Timed out waiting for {locator.description}",
                    extra={"selector": str(locator), "url": self.url},
                )
                raise SelectorTimeout(str(locator), self.url, timeout) from e
            logger.debug(f"{locator.description} did not appear")
            return None

    def query_one(
        self, scope: ElementHandle | None, locator: Locator
    ) -> ElementHandle | None:
        root: Page | ElementHandle = self._page if scope is None else scope
        return root.query_selector(playwright_selector(locator))

    def query_all(
        self, scope: ElementHandle | None, locator: Locator
    ) -> list[ElementHandle]:
        root: Page | ElementHandle = self._page if scope is None else scope
        return root.query_selector_all(playwright_selector(locator))

    def text_of(self, element: ElementHandle) -> str:
        return element.inner_text().strip()

    def activate(self, locator: Locator) -> bool:
        """Click the control matched by ``locator`` and wait for navigation.

        Returns:
            False if the control is absent, True after navigating.

        Raises:
            NavigationTimeout: If the navigation after the click times out.
            AdvanceFailed: If the click fails or the next page is not 2xx.
        """
        scope = None
        if locator.scope is not None:
            scope = self.query_one(None, locator.scope)
            if scope is None:
                return False
        control = self.query_one(scope, locator)
        if control is None:
            return False

        source = self.url
        try:
            with self._page.expect_navigation(
                wait_until="domcontentloaded"
            ) as navigation:
                control.click()
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(source, self.timeout_ms) from e
        except PlaywrightError as e:
            raise AdvanceFailed(str(locator), source, e.message) from e

        response = navigation.value
        if response is not None and not response.ok:
            raise AdvanceFailed(
                str(locator), source, f"HTTP {response.status}"
            )
        logger.debug(f"Advanced from {source} to {self.url}")
        return True
