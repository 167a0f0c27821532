"""Field descriptors and the field extractor.

A FieldDescriptor names one column of the output and says where its value
lives on the page. FieldExtractor resolves descriptors against a Document:
single values through ``extract`` and the variable-length track list
through ``extract_all``.

Required fields that are missing raise MissingRequiredField. Optional fields
that are missing come back as an empty string, since not every release page
fills in every detail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from pyrate_limiter import Rate

from fugotcha.common.exceptions import MissingRequiredField
from fugotcha.common.locator import Locator

if TYPE_CHECKING:
    from fugotcha.common.document import Document, Element

logger = logging.getLogger(__name__)


class Presence(Enum):
    """Whether a field must be present on every page."""

    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class FieldDescriptor:
    """One extractable field of the page template.

    Attributes:
        name: Column label, e.g. "Venue".
        locator: Where the field's element lives.
        presence: REQUIRED fields abort the page when missing.
        prefix: Literal text stripped from the element's text before
            trimming (e.g. a "Venue:" label rendered inside the element).
    """

    name: str
    locator: Locator
    presence: Presence = Presence.OPTIONAL
    prefix: str = ""

    @property
    def required(self) -> bool:
        return self.presence is Presence.REQUIRED


@dataclass(frozen=True)
class SiteSchema:
    """The fixed extraction schema for one page template family.

    Attributes:
        base_url: URL that page slugs are appended to.
        fields: Fixed-arity fields in column order.
        tracks: Descriptor for the variable-length track list.
        next_page: Locator of the "next page" control.
        rate_limits: Navigation rate limits for polite crawling.
    """

    base_url: str
    fields: tuple[FieldDescriptor, ...]
    tracks: FieldDescriptor
    next_page: Locator
    rate_limits: tuple[Rate, ...] = field(default_factory=tuple)


class FieldExtractor:
    """Pulls field values out of a Document.

    If a descriptor's locator has a scope, the extractor waits for the scope
    element and queries inside it. Otherwise it waits for the element itself.

    Resolved scopes are remembered until the document moves to another page,
    so fields sharing a container wait for it once per page.
    """

    def __init__(self) -> None:
        self._scopes: dict[Locator, Element | None] = {}
        self._page: tuple[Document, str] | None = None

    def extract(self, document: Document, descriptor: FieldDescriptor) -> str:
        """Extract a single field value.

        If several elements match, the first one is used.

        Args:
            document: The page to read from.
            descriptor: The field to extract.

        Returns:
            The element's trimmed text with the descriptor's prefix removed,
            or "" if an optional field is absent.

        Raises:
            MissingRequiredField: If a required field is absent.
        """
        locator = descriptor.locator
        if locator.scope is None:
            element = document.wait_for_element(
                locator, required=descriptor.required
            )
            if element is None:
                return self._missing(document, descriptor, scope_found=True)
        else:
            scope = self._resolve_scope(document, descriptor)
            if scope is None:
                return self._missing(document, descriptor, scope_found=False)
            element = document.query_one(scope, locator)
            if element is None:
                return self._missing(document, descriptor, scope_found=True)

        value = self._clean(document.text_of(element), descriptor)
        logger.debug(f"Extracted {descriptor.name!r}: {value!r}")
        return value

    def extract_all(
        self, document: Document, descriptor: FieldDescriptor
    ) -> list[str]:
        """Extract every value matching a field, in document order.

        For a scoped descriptor, an existing scope with no matches yields an
        empty list even when required; only a missing scope counts as a
        missing field. An unscoped descriptor has no such container, so a
        required one with no match at all is missing.

        Args:
            document: The page to read from.
            descriptor: The multi-valued field to extract.

        Returns:
            Trimmed text of every match (possibly empty).

        Raises:
            MissingRequiredField: If a required descriptor's scope is absent,
                or a required unscoped descriptor matches nothing.
        """
        locator = descriptor.locator
        if locator.scope is None:
            first = document.wait_for_element(
                locator, required=descriptor.required
            )
            if first is None:
                self._missing(document, descriptor, scope_found=True)
                return []
            scope = None
        else:
            scope = self._resolve_scope(document, descriptor)
            if scope is None:
                self._missing(document, descriptor, scope_found=False)
                return []

        values = [
            self._clean(document.text_of(element), descriptor)
            for element in document.query_all(scope, locator)
        ]
        logger.debug(f"Extracted {len(values)} value(s) for {descriptor.name!r}")
        return values

    def _resolve_scope(
        self, document: Document, descriptor: FieldDescriptor
    ) -> Element | None:
        scope = descriptor.locator.scope
        assert scope is not None
        return self._resolve_container(document, scope, descriptor.required)

    def _resolve_container(
        self, document: Document, scope: Locator, required: bool
    ) -> Element | None:
        self._track_page(document)
        if scope in self._scopes:
            return self._scopes[scope]

        # Only the outermost container is waited for; inner ones are queried.
        if scope.scope is None:
            container = document.wait_for_element(scope, required=required)
        else:
            outer = self._resolve_container(document, scope.scope, required)
            container = (
                None if outer is None else document.query_one(outer, scope)
            )
        self._scopes[scope] = container
        return container

    def _track_page(self, document: Document) -> None:
        page = self._page
        if page is None or page[0] is not document or page[1] != document.url:
            self._scopes.clear()
            self._page = (document, document.url)

    def _missing(
        self,
        document: Document,
        descriptor: FieldDescriptor,
        scope_found: bool,
    ) -> str:
        locator = descriptor.locator
        if descriptor.required:
            raise MissingRequiredField(
                field_name=descriptor.name,
                selector=str(locator),
                selector_type=locator.selector_type,
                request_url=document.url,
                scope_found=scope_found,
            )
        logger.debug(
            f"Optional field {descriptor.name!r} not present",
            extra={"selector": str(locator), "url": document.url},
        )
        return ""

    @staticmethod
    def _clean(text: str, descriptor: FieldDescriptor) -> str:
        if descriptor.prefix:
            text = text.replace(descriptor.prefix, "", 1)
        return text.strip()
