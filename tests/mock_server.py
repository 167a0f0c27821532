"""Mock Fugazi Live Series catalog.

This module defines the release pages used across the test suite. Pages
chain together through their "next" buttons; the last page has none.

The same pages are served two ways:

- ``create_app()`` builds an aiohttp application for end-to-end tests
  (real HTTP, used by the CLI tests).
- ``catalog_transport()`` builds an httpx.MockTransport so LxmlDocument can
  be exercised without a socket.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

import httpx
from aiohttp import web

SERIES_PATH = "/fugazi_live_series"
MOCK_HOST = "http://catalog.test"
MOCK_BASE_URL = f"{MOCK_HOST}{SERIES_PATH}"


@dataclass
class MockRelease:
    """One release page in the mock catalog.

    ``None`` for a detail means the element is left out of the page;
    ``tracks=None`` leaves out the whole track list.
    """

    slug: str
    release_id: str | None
    tracks: list[str] | None = field(default_factory=list)
    date: str | None = None
    venue: str | None = None
    city: str | None = None
    door_price: str | None = None
    attendance: str | None = None
    recorded_by: str | None = None
    mastered_by: str | None = None
    show_info: bool = True
    next_slug: str | None = None
    # Overrides the next link's href verbatim (e.g. a dead link)
    next_href: str | None = None


RELEASES: list[MockRelease] = [
    MockRelease(
        slug="p1",
        release_id="20XXX",
        tracks=["Waiting Room", "Bad Mouth", "Song #1"],
        venue="Fort Reno",
        next_slug="p2",
    ),
    MockRelease(
        slug="p2",
        release_id="FLS0002",
        tracks=["Merchandise", "Turnover"],
        date="August 3, 1988",
        venue="9:30 Club",
        city="Washington, DC",
        door_price="$5",
        attendance="450",
        recorded_by='Joey "Pick" Picuri',
        mastered_by="Ian MacKaye",
        next_slug="p3",
    ),
    MockRelease(
        slug="p3",
        release_id="FLS0003",
        tracks=[],
        show_info=False,
    ),
]

# Header and first data line for a one-page scrape starting at p1.
EXPECTED_HEADER = (
    '"Page Slug","Release ID","Date","Venue","City","Door Price",'
    '"Attendance","Recorded By","Mastered By","Tracks =>"\n'
)
EXPECTED_P1_LINE = (
    '"p1","20XXX","","Fort Reno","","","","","",'
    '"Waiting Room","Bad Mouth","Song #1"\n'
)


def _detail(css_class: str, value: str | None) -> str:
    if value is None:
        return ""
    return f'<p>Label: <span class="{css_class}">{escape(value)}</span></p>'


def render_release(release: MockRelease) -> str:
    """Render a release page the way the catalog lays it out."""
    parts = ["<html><head><title>Fugazi Live Series</title></head><body>"]

    parts.append('<div id="productInfo"><h1>Fugazi</h1>')
    if release.release_id is not None:
        parts.append(
            '<h2 class="releaseNumber">'
            f"Fugazi Live Series {escape(release.release_id)}</h2>"
        )
    parts.append("</div>")

    if release.show_info:
        parts.append('<div id="showInfo">')
        parts.append(_detail("showDate", release.date))
        parts.append(_detail("venue", release.venue))
        parts.append(_detail("city", release.city))
        parts.append(_detail("doorPrice", release.door_price))
        parts.append(_detail("attendance", release.attendance))
        parts.append(_detail("recordedBy", release.recorded_by))
        parts.append(_detail("masteredBy", release.mastered_by))
        parts.append("</div>")

    if release.tracks is not None:
        parts.append('<div class="mp3_list"><ol>')
        for track in release.tracks:
            parts.append(
                f'<li>\n  <span class="track_name">  {escape(track)}  </span>\n</li>'
            )
        parts.append("</ol></div>")

    href = release.next_href
    if href is None and release.next_slug is not None:
        href = f"{SERIES_PATH}/{release.next_slug}"
    if href is not None:
        parts.append(f'<div id="nextButton"><a href="{escape(href)}">next</a></div>')

    parts.append("</body></html>")
    return "\n".join(parts)


def _pages(releases: list[MockRelease]) -> dict[str, str]:
    return {
        f"{SERIES_PATH}/{release.slug}": render_release(release)
        for release in releases
    }


def catalog_transport(
    releases: list[MockRelease] | None = None,
) -> httpx.MockTransport:
    """Serve the catalog through an in-memory httpx transport."""
    pages = _pages(releases if releases is not None else RELEASES)

    def handler(request: httpx.Request) -> httpx.Response:
        body = pages.get(request.url.path)
        if body is None:
            return httpx.Response(404, text="<html><body>Not found</body></html>")
        return httpx.Response(
            200, text=body, headers={"content-type": "text/html"}
        )

    return httpx.MockTransport(handler)


def create_app(releases: list[MockRelease] | None = None) -> web.Application:
    """Create the aiohttp application serving the catalog."""
    pages = _pages(releases if releases is not None else RELEASES)

    async def release_page(request: web.Request) -> web.Response:
        body = pages.get(request.path)
        if body is None:
            raise web.HTTPNotFound(text="Not found")
        return web.Response(text=body, content_type="text/html")

    app = web.Application()
    app.router.add_get(SERIES_PATH + "/{slug}", release_page)
    return app
