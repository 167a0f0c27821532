"""Playwright-backed document for JavaScript-rendered pages.

This module provides a Document implementation that drives a real browser
through Playwright's sync API.
"""

from fugotcha.driver.playwright_driver.playwright_document import (
    PlaywrightDocument,
)

__all__ = ["PlaywrightDocument"]
