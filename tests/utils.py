"""Test utilities shared across the scraper tests."""

from __future__ import annotations

from typing import Any

import httpx

from fugotcha.common.locator import Locator
from fugotcha.common.lxml_document import LxmlDocument

PAGE_URL = "http://catalog.test/fugazi_live_series/p1"


def document_for(html: str, url: str = PAGE_URL) -> LxmlDocument:
    """Load ``html`` into an LxmlDocument as if it had been fetched from ``url``.

    Example:
        document = document_for("<div id='a'>x</div>")
        document.query_one(None, Locator.css("#a", "a"))
    """

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=html)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    document = LxmlDocument(client=client)
    document.goto(url)
    return document


class ScriptedDocument:
    """A Document whose ``activate`` outcomes are scripted.

    Each outcome is True (navigated), False (no control) or an exception
    instance to raise. Only what the pagination controller touches is
    implemented.
    """

    def __init__(self, outcomes: list[Any], url: str = PAGE_URL) -> None:
        self.outcomes = list(outcomes)
        self.url = url
        self.activated: list[Locator] = []

    def activate(self, locator: Locator) -> bool:
        self.activated.append(locator)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingLimiter:
    """Stands in for a pyrate_limiter Limiter and records acquisitions."""

    def __init__(self) -> None:
        self.acquired: list[tuple[str, int]] = []

    def try_acquire(self, name: str, weight: int = 1) -> bool:
        self.acquired.append((name, weight))
        return True


class CountingDocument:
    """Wraps a Document and records every locator it is asked to wait for."""

    def __init__(self, document: Any) -> None:
        self._document = document
        self.waited: list[Locator] = []

    def __getattr__(self, name: str) -> Any:
        return getattr(self._document, name)

    def wait_for_element(self, locator: Locator, required: bool = False) -> Any:
        self.waited.append(locator)
        return self._document.wait_for_element(locator, required=required)
