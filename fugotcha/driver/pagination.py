"""Pagination state machine.

The controller decides, after each page has been emitted, whether the
session stops (page limit reached), continues (the next-page control was
activated) or is exhausted (there is no next page to go to).

States::

    READY -> CONTINUING -> ... -> STOPPED
                               -> EXHAUSTED

Exhaustion is the normal end of the catalog, not an error. The controller
records why it happened so an absent control can be told apart from a
control that failed to navigate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from fugotcha.common.exceptions import AdvanceFailed
from fugotcha.common.locator import Locator

if TYPE_CHECKING:
    from pyrate_limiter import Limiter

    from fugotcha.common.document import Document

logger = logging.getLogger(__name__)


class PaginationState(Enum):
    READY = "ready"
    CONTINUING = "continuing"
    STOPPED = "stopped"
    EXHAUSTED = "exhausted"


class ExhaustionReason(Enum):
    NO_NEXT_CONTROL = "no_next_control"
    ACTIVATION_FAILED = "activation_failed"


@dataclass
class TraversalState:
    """Progress counters for one session.

    Attributes:
        limit: Maximum pages to visit; 0 means unbounded.
        pages_visited: Pages emitted so far.
        has_more: False once the traversal has ended.
    """

    limit: int = 0
    pages_visited: int = 0
    has_more: bool = True

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")

    @property
    def limit_reached(self) -> bool:
        return self.limit > 0 and self.pages_visited >= self.limit


class PaginationController:
    """Drives the continue/stop decision between pages.

    Args:
        next_page: Locator of the "next page" control.
        limit: Maximum pages to visit; 0 means unbounded.
        rate_limiter: Optional limiter acquired before activating the
            next-page control.
    """

    def __init__(
        self,
        next_page: Locator,
        limit: int = 0,
        rate_limiter: Limiter | None = None,
    ) -> None:
        self.next_page = next_page
        self.rate_limiter = rate_limiter
        self.traversal = TraversalState(limit=limit)
        self.state = PaginationState.READY
        self.exhaustion_reason: ExhaustionReason | None = None

    @property
    def finished(self) -> bool:
        return self.state in (PaginationState.STOPPED, PaginationState.EXHAUSTED)

    @property
    def pages_visited(self) -> int:
        return self.traversal.pages_visited

    def advance(self, document: Document) -> bool:
        """Count the page just emitted and try to move to the next one.

        Args:
            document: The document showing the page just emitted.

        Returns:
            True if the document now shows the next page, False if the
            traversal has ended.

        Raises:
            RuntimeError: If the traversal has already ended.
        """
        if self.finished:
            raise RuntimeError(
                f"Pagination already finished ({self.state.value})"
            )

        self.traversal.pages_visited += 1

        if self.traversal.limit_reached:
            logger.info(
                f"Page limit reached after {self.pages_visited} page(s)"
            )
            return self._finish(PaginationState.STOPPED)

        if self.rate_limiter is not None:
            self.rate_limiter.try_acquire("navigation", 1)

        try:
            advanced = document.activate(self.next_page)
        except AdvanceFailed as e:
            logger.info(
                f"Next page could not be loaded; treating as end of data: {e.reason}",
                extra={"url": e.request_url, "selector": e.selector},
            )
            return self._exhaust(ExhaustionReason.ACTIVATION_FAILED)

        if not advanced:
            logger.info('No "next" link; reached end of scrapable data.')
            return self._exhaust(ExhaustionReason.NO_NEXT_CONTROL)

        self.state = PaginationState.CONTINUING
        return True

    def _exhaust(self, reason: ExhaustionReason) -> bool:
        self.exhaustion_reason = reason
        return self._finish(PaginationState.EXHAUSTED)

    def _finish(self, state: PaginationState) -> bool:
        self.state = state
        self.traversal.has_more = False
        return False
