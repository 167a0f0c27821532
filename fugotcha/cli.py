"""Fugotcha CLI: scrape the Fugazi Live Series into quoted CSV lines.

Usage:
    fugotcha -p p1                          # Scrape one page to stdout
    fugotcha -p p1 -c 10 -o shows.csv       # Scrape 10 pages into a new file
    fugotcha -p fugazi_live_series/p1 -c 0  # Scrape until the last page
    fugotcha -p p1 --driver http            # Fetch static HTML, no browser
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import IO, Any

import click
from pydantic import ValidationError as PydanticValidationError
from pyrate_limiter import Limiter

from fugotcha.common.document import Document
from fugotcha.common.exceptions import FugotchaException, ValidationError
from fugotcha.common.lxml_document import LxmlDocument
from fugotcha.common.output import RecordWriter, open_destination, write_session
from fugotcha.common.records import page_identifier
from fugotcha.driver.pagination import PaginationState
from fugotcha.driver.session import ScrapeSession, SessionConfig
from fugotcha.sites import fugazi

logger = logging.getLogger(__name__)

DRIVERS = ("playwright", "http")

EPILOG = (
    "Fugotcha is a command-line utility for scraping data from the "
    "Fugazi Live Series on Dischord.com."
)


def validate_page(value: str | None) -> str:
    """Return the page slug, or raise ValidationError.

    If a whole path is given, only its last segment is kept.
    """
    if value is None or not value.strip():
        raise ValidationError("Page is a required parameter.", "page")
    slug = page_identifier(value.strip())
    if not slug:
        raise ValidationError(f"Invalid page slug: {value!r}", "page")
    return slug


def validate_count(value: str | int) -> int:
    """Return the page count as a non-negative int, or raise ValidationError."""
    try:
        limit = int(str(value).strip())
    except ValueError:
        limit = -1
    if limit < 0:
        raise ValidationError("Count must be a non-negative integer.", "count")
    return limit


def validate_driver(value: str) -> str:
    driver = value.strip().lower()
    if driver not in DRIVERS:
        raise ValidationError(
            f"Driver must be one of: {', '.join(DRIVERS)}.", "driver"
        )
    return driver


@contextmanager
def open_document(driver: str, headed: bool = False) -> Iterator[Document]:
    """Open the document implementation selected on the command line."""
    if driver == "http":
        with LxmlDocument.open() as document:
            yield document
        return

    try:
        from fugotcha.driver.playwright_driver import PlaywrightDocument
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. "
            "Install Playwright and its browsers: "
            "pip install playwright && playwright install chromium"
        ) from e

    with PlaywrightDocument.open(headless=not headed) as document:
        yield document


@click.command(epilog=EPILOG)
@click.option(
    "-p",
    "--page",
    default=None,
    help=(
        'Required. The slug of the page to scrape (the URL after '
        '"fugazi_live_series").'
    ),
)
@click.option(
    "-c",
    "--count",
    default="1",
    show_default=True,
    help="Number of pages to scrape; 0 for all remaining pages.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="File to write to. Must not exist. Defaults to stdout.",
)
@click.option(
    "--driver",
    "driver_name",
    default="playwright",
    show_default=True,
    help="Page driver: playwright (real browser) or http (static HTML).",
)
@click.option(
    "--base-url",
    envvar="FUGOTCHA_BASE_URL",
    default=None,
    help=f"Catalog base URL. [default: {fugazi.BASE_URL}]",
)
@click.option("--headed", is_flag=True, help="Show the browser window.")
@click.option("--no-header", is_flag=True, help="Omit the header line.")
@click.option(
    "--no-rate-limit",
    is_flag=True,
    help="Do not pace page loads.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.version_option(package_name="fugotcha")
def cli(
    page: str | None,
    count: str,
    output: str | None,
    driver_name: str,
    base_url: str | None,
    headed: bool,
    no_header: bool,
    no_rate_limit: bool,
    verbose: bool,
) -> None:
    """Scrape release data from the Fugazi Live Series.

    Writes one quoted, comma-separated line per page: the page slug, the
    release ID, the show details, then every track name.

    \b
    Examples:
        fugotcha -p p1
        fugotcha -p p1 -c 0 -o shows.csv
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        _run(
            page=page,
            count=count,
            output=output,
            driver_name=driver_name,
            base_url=base_url,
            headed=headed,
            no_header=no_header,
            no_rate_limit=no_rate_limit,
        )
    except FugotchaException as e:
        logger.error(str(e), extra={"url": e.request_url, **e.context})
        raise click.ClickException(e.message) from e


def _run(
    page: str | None,
    count: str,
    output: str | None,
    driver_name: str,
    base_url: str | None,
    headed: bool,
    no_header: bool,
    no_rate_limit: bool,
) -> None:
    schema = fugazi.build_schema(base_url or fugazi.BASE_URL)
    config = _build_config(
        start_slug=validate_page(page),
        limit=validate_count(count),
        base_url=schema.base_url,
        include_header=not no_header,
    )
    driver = validate_driver(driver_name)

    rate_limiter = None
    if schema.rate_limits and not no_rate_limit:
        rate_limiter = Limiter(list(schema.rate_limits))

    # The destination is claimed once the document is up, before any page
    with open_document(driver, headed) as document:
        with _open_output(output) as stream:
            session = ScrapeSession(document, schema, config, rate_limiter)
            writer = RecordWriter(stream, config.encoder())
            written = write_session(session, writer)

    controller = session.controller
    if controller.state is PaginationState.EXHAUSTED and config.limit:
        logger.info(
            f"Catalog ended after {written} of {config.limit} requested page(s)"
        )
    if output:
        click.echo(f"Wrote {written} record(s) to {output}", err=True)


def _open_output(output: str | None) -> IO[Any]:
    if output:
        return open_destination(output)
    return click.open_file("-", "w")


def _build_config(**kwargs: Any) -> SessionConfig:
    try:
        return SessionConfig(**kwargs)
    except PydanticValidationError as e:
        error = e.errors()[0]
        parameter = ".".join(str(part) for part in error["loc"])
        raise ValidationError(
            f"Invalid {parameter}: {error['msg']}", parameter
        ) from e


def main() -> None:
    """Entry point for the ``fugotcha`` console script."""
    cli()

