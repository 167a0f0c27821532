"""Fugazi Live Series schema for dischord.com.

Each release page in the series carries a release number, a block of show
details and an MP3 track list, plus a "next" button that leads to the
following release.

The release number is rendered as "Fugazi Live Series FLS0001"; the series
name is stripped so only the identifier is kept. Show details vary from page
to page, so every detail field is optional.
"""

from __future__ import annotations

from pyrate_limiter import Duration, Rate

from fugotcha.common.fields import FieldDescriptor, Presence, SiteSchema
from fugotcha.common.locator import Locator

BASE_URL = "https://www.dischord.com/fugazi_live_series"

PRODUCT_INFO = Locator.css("#productInfo", "product info block")
SHOW_INFO = Locator.css("#showInfo", "show details block")
TRACK_LIST = Locator.css(".mp3_list", "MP3 track list")

RELEASE_ID = FieldDescriptor(
    name="Release ID",
    locator=Locator.css(".releaseNumber", "release number", PRODUCT_INFO),
    presence=Presence.REQUIRED,
    prefix="Fugazi Live Series",
)

DETAIL_FIELDS = (
    FieldDescriptor("Date", Locator.css(".showDate", "show date", SHOW_INFO)),
    FieldDescriptor("Venue", Locator.css(".venue", "venue", SHOW_INFO)),
    FieldDescriptor("City", Locator.css(".city", "city", SHOW_INFO)),
    FieldDescriptor(
        "Door Price", Locator.css(".doorPrice", "door price", SHOW_INFO)
    ),
    FieldDescriptor(
        "Attendance", Locator.css(".attendance", "attendance", SHOW_INFO)
    ),
    FieldDescriptor(
        "Recorded By", Locator.css(".recordedBy", "recorded by", SHOW_INFO)
    ),
    FieldDescriptor(
        "Mastered By", Locator.css(".masteredBy", "mastered by", SHOW_INFO)
    ),
)

TRACKS = FieldDescriptor(
    name="Tracks",
    locator=Locator.css(".track_name", "track names", TRACK_LIST),
    presence=Presence.REQUIRED,
)

NEXT_PAGE = Locator.css("#nextButton a", "next page link")

RATE_LIMITS = (Rate(1, Duration.SECOND),)


def build_schema(base_url: str = BASE_URL) -> SiteSchema:
    """Return the Fugazi Live Series schema.

    Args:
        base_url: Catalog URL that page slugs are appended to; override it
            to scrape a mirror.
    """
    return SiteSchema(
        base_url=base_url,
        fields=(RELEASE_ID, *DETAIL_FIELDS),
        tracks=TRACKS,
        next_page=NEXT_PAGE,
        rate_limits=RATE_LIMITS,
    )
