"""Scrape session: the page-by-page extraction loop.

A session loads the start page once, then for every page:

1. extracts each fixed field in schema order, then the track list,
2. builds the record and yields it,
3. asks the pagination controller whether to continue.

The loop is lazy and single-threaded; the next page is only requested after
the consumer has taken the current record. Any fatal error (missing
required field, failed page load, timeout) propagates out of the generator
and ends the session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pyrate_limiter import Limiter

from fugotcha.common.csv_encoder import CsvEncoder
from fugotcha.common.exceptions import PageLoadFailed
from fugotcha.common.fields import FieldExtractor, SiteSchema
from fugotcha.common.records import Record, RecordBuilder, page_identifier
from fugotcha.driver.pagination import PaginationController

if TYPE_CHECKING:
    from fugotcha.common.document import Document

logger = logging.getLogger(__name__)


class SessionConfig(BaseModel):
    """Settings for one scrape session.

    Attributes:
        base_url: URL the start slug is appended to.
        start_slug: Slug of the first page to scrape.
        limit: Maximum pages to scrape; 0 means until the last page.
        quote_char: Character wrapped around every output value.
        separator: Character between output values.
        line_terminator: Appended to every output line.
        include_header: Whether to emit the header line.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(min_length=1)
    start_slug: str = Field(min_length=1)
    limit: int = Field(default=1, ge=0)
    quote_char: str = Field(default='"', min_length=1, max_length=1)
    separator: str = Field(default=",", min_length=1, max_length=1)
    line_terminator: str = "\n"
    include_header: bool = True

    @model_validator(mode="after")
    def _check_delimiters(self) -> SessionConfig:
        if self.quote_char == self.separator:
            raise ValueError("quote_char and separator must differ")
        return self

    @property
    def start_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.start_slug}"

    def encoder(self) -> CsvEncoder:
        return CsvEncoder(
            quote_char=self.quote_char,
            separator=self.separator,
            line_terminator=self.line_terminator,
        )


class ScrapeSession:
    """Runs the extraction loop over a document.

    A session runs once. Create a new one to scrape again.

    Args:
        document: The browsing collaborator.
        schema: Fields, track list and next-page locator for the site.
        config: Session settings.
        rate_limiter: Optional limiter acquired before every navigation.

    Example::

        session = ScrapeSession(document, build_schema(), config)
        for record in session.run():
            print(record)
    """

    def __init__(
        self,
        document: Document,
        schema: SiteSchema,
        config: SessionConfig,
        rate_limiter: Limiter | None = None,
    ) -> None:
        self.document = document
        self.schema = schema
        self.config = config
        self.rate_limiter = rate_limiter
        self.extractor = FieldExtractor()
        self.builder = RecordBuilder(schema.fields)
        self.controller = PaginationController(
            schema.next_page, limit=config.limit, rate_limiter=rate_limiter
        )
        self._started = False

    def header(self) -> Record | None:
        """The header record, or None when headers are disabled."""
        if not self.config.include_header:
            return None
        return self.builder.header()

    def run(self) -> Iterator[Record]:
        """Start the session and return a lazy iterator of records.

        Raises:
            RuntimeError: If the session has already been run.
        """
        if self._started:
            raise RuntimeError(
                "ScrapeSession can only run once; create a new session"
            )
        self._started = True
        return self._iterate()

    def _iterate(self) -> Iterator[Record]:
        start_url = self.config.start_url
        limit = self.config.limit
        logger.info(
            f"Starting scrape at {start_url} "
            f"(limit: {limit if limit else 'unbounded'})"
        )

        if self.rate_limiter is not None:
            self.rate_limiter.try_acquire("navigation", 1)
        self.document.goto(start_url)

        while True:
            record = self._scrape_page()
            yield record

            if not self.controller.advance(self.document):
                break

        logger.info(
            f"Scrape finished after {self.controller.pages_visited} page(s): "
            f"{self.controller.state.value}",
            extra={
                "state": self.controller.state.value,
                "exhaustion_reason": self.controller.exhaustion_reason.value
                if self.controller.exhaustion_reason
                else None,
            },
        )

    def _scrape_page(self) -> Record:
        url = self.document.url
        page_id = page_identifier(url)
        if not page_id:
            raise PageLoadFailed(
                url, None, reason="location has no page identifier"
            )

        values = {
            descriptor.name: self.extractor.extract(self.document, descriptor)
            for descriptor in self.schema.fields
        }
        tracks = self.extractor.extract_all(self.document, self.schema.tracks)

        record = self.builder.build(page_id, values, tracks)
        logger.info(
            f"Scraped {page_id}: {len(tracks)} track(s)",
            extra={"url": url, "page": page_id},
        )
        return record
