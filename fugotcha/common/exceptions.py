"""Exception types for scraper errors.

Every failure the scraper can report derives from FugotchaException, which
formats its message together with the URL being processed and any extra
context (selector, counts, status codes).

Fatal conditions (bad input, failed page loads, missing required fields,
timeouts, an existing output file, a browser that will not start) abort the
run. AdvanceFailed is the one exception that is expected: the pagination
controller catches it and treats it as the end of the catalog.
"""

from __future__ import annotations

from typing import Any


class FugotchaException(Exception):
    """Base class for all scraper errors.

    Attributes:
        message: Human-readable description of what went wrong.
        request_url: The URL being processed when the error occurred.
        context: Additional key/value details rendered under the message.
    """

    def __init__(
        self,
        message: str,
        request_url: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            request_url: The URL of the page that triggered this error.
            context: Optional dict of additional context.
        """
        self.message = message
        self.request_url = request_url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with URL and context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        if self.request_url:
            parts.append(f"URL: {self.request_url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class ValidationError(FugotchaException):
    """Raised when command-line input is missing or malformed.

    Raised before any page is visited.
    """

    def __init__(self, message: str, parameter: str | None = None) -> None:
        self.parameter = parameter
        context = {"parameter": parameter} if parameter else None
        super().__init__(message, context=context)


class ScraperAssumptionException(FugotchaException):
    """Base class for violated assumptions about the page template.

    The scraper assumes a fixed page layout. When a page does not match,
    one of these is raised with enough context to find which selector broke.
    """


class MissingRequiredField(ScraperAssumptionException):
    """Raised when a required field's locator matches nothing.

    Optional fields never raise this; their absence yields an empty value.

    Attributes:
        field_name: Label of the field that was not found.
        selector: The selector that produced no match.
        selector_type: "css" or "xpath".
    """

    def __init__(
        self,
        field_name: str,
        selector: str,
        selector_type: str,
        request_url: str,
        scope_found: bool = True,
    ) -> None:
        """Initialize the exception.

        Args:
            field_name: Label of the missing field.
            selector: Selector that matched nothing.
            selector_type: Type of selector ("css" or "xpath").
            request_url: URL of the page being extracted.
            scope_found: False if the enclosing scope element was missing.
        """
        self.field_name = field_name
        self.selector = selector
        self.selector_type = selector_type
        self.scope_found = scope_found

        message = (
            f"Required field '{field_name}' not found: "
            f"no element matched {selector_type} selector '{selector}'"
        )
        context = {
            "field": field_name,
            "selector": selector,
            "selector_type": selector_type,
            "scope_found": scope_found,
        }
        super().__init__(message, request_url, context)


class PageLoadFailed(FugotchaException):
    """Raised when navigation returns a non-success status.

    Attributes:
        status_code: The HTTP status received, or None if no response.
    """

    def __init__(
        self,
        request_url: str,
        status_code: int | None,
        reason: str | None = None,
    ) -> None:
        self.status_code = status_code
        if reason is None:
            reason = f"HTTP {status_code} (expected 2xx)"
        super().__init__(
            f"Failed to load page: {reason}",
            request_url,
            {"status_code": status_code},
        )


class TransientException(FugotchaException):
    """Base class for timeouts raised by the browsing collaborator.

    No retry is attempted; these are fatal like every other error, but they
    are kept distinct so a timeout can be told apart from a template change.
    """


class NavigationTimeout(TransientException):
    """Raised when a page load or post-click navigation times out."""

    def __init__(self, request_url: str, timeout_ms: float | None) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Navigation timed out after {timeout_ms}ms",
            request_url,
            {"timeout_ms": timeout_ms},
        )


class SelectorTimeout(TransientException):
    """Raised when waiting for a required element times out."""

    def __init__(
        self, selector: str, request_url: str, timeout_ms: float | None
    ) -> None:
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for '{selector}'",
            request_url,
            {"selector": selector, "timeout_ms": timeout_ms},
        )


class AdvanceFailed(FugotchaException):
    """Raised when the next-page control exists but activating it failed.

    Never escapes the pagination controller.
    """

    def __init__(self, selector: str, request_url: str, reason: str) -> None:
        self.selector = selector
        self.reason = reason
        super().__init__(
            f"Could not advance to the next page: {reason}",
            request_url,
            {"selector": selector},
        )


class OutputDestinationConflict(FugotchaException):
    """Raised when the output destination already exists."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Output destination already exists: {path}",
            context={"path": path},
        )


class DriverLaunchFailed(FugotchaException):
    """Raised when the browser behind a document cannot be started.

    Raised before any page is visited, usually because the browser binaries
    are not installed.
    """

    def __init__(self, browser_type: str, reason: str) -> None:
        self.browser_type = browser_type
        self.reason = reason
        super().__init__(
            f"Could not launch {browser_type}: {reason}",
            context={"browser_type": browser_type},
        )
