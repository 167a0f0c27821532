"""Record assembly.

A Record is one output line's worth of values for a single page, laid out
as ``[page slug, fixed fields..., tracks...]``. Records are plain lists of
strings; quoting and escaping happen later, in CsvEncoder.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import urlparse

from fugotcha.common.fields import FieldDescriptor

Record = list[str]

PAGE_LABEL = "Page Slug"
TRACKS_SENTINEL = "Tracks =>"


def page_identifier(location: str) -> str:
    """Derive a page identifier from a URL or path.

    The identifier is the last non-empty path segment. Query strings and
    fragments are ignored.

    Examples:
        >>> page_identifier("https://www.dischord.com/fugazi_live_series/p1")
        'p1'
        >>> page_identifier("fugazi_live_series/washington-dc-usa-9387/")
        'washington-dc-usa-9387'
        >>> page_identifier("https://www.dischord.com/")
        ''
    """
    path = urlparse(location).path
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else ""


class RecordBuilder:
    """Lays out extracted values in the fixed column order.

    Args:
        fields: The fixed-arity fields, in column order.
    """

    def __init__(self, fields: Sequence[FieldDescriptor]) -> None:
        self.fields = tuple(fields)

    @property
    def fixed_column_count(self) -> int:
        """Columns before the track tail: page slug plus every field."""
        return 1 + len(self.fields)

    def build(
        self,
        page_id: str,
        field_values: Mapping[str, str],
        tracks: Sequence[str],
    ) -> Record:
        """Flatten one page's values into a record.

        Fields missing from ``field_values`` are filled with "" so every
        record keeps the same fixed arity.
        """
        record: Record = [page_id]
        record.extend(field_values.get(f.name, "") for f in self.fields)
        record.extend(tracks)
        return record

    def header(self) -> Record:
        """Column labels, ending with the track sentinel label."""
        return [PAGE_LABEL, *(f.name for f in self.fields), TRACKS_SENTINEL]
