"""Delimited-line encoding for records.

Every value is quoted, embedded quote characters are doubled, values are
joined with the separator and the line ends with a single terminator. This
is RFC 4180 quoting with QUOTE_ALL, so the stdlib csv writer does the work.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable


class CsvEncoder:
    """Encodes sequences of strings as single quoted, delimited lines.

    Args:
        quote_char: Character wrapped around every value.
        separator: Character placed between values.
        line_terminator: Appended to every line.

    Examples:
        >>> CsvEncoder().encode_row(["p1", "Fort Reno"])
        '"p1","Fort Reno"\\n'
        >>> CsvEncoder(separator=";").encode_row(["9:30 Club", "DC"])
        '"9:30 Club";"DC"\\n'
    """

    def __init__(
        self,
        quote_char: str = '"',
        separator: str = ",",
        line_terminator: str = "\n",
    ) -> None:
        if len(quote_char) != 1 or len(separator) != 1:
            raise ValueError("quote_char and separator must be single characters")
        if quote_char == separator:
            raise ValueError("quote_char and separator must differ")
        self.quote_char = quote_char
        self.separator = separator
        self.line_terminator = line_terminator

    def encode_row(self, values: Iterable[str]) -> str:
        """Encode one record as a line, including its terminator."""
        buffer = io.StringIO()
        writer = csv.writer(
            buffer,
            delimiter=self.separator,
            quotechar=self.quote_char,
            quoting=csv.QUOTE_ALL,
            doublequote=True,
            lineterminator=self.line_terminator,
        )
        writer.writerow(values)
        return buffer.getvalue()

    def encode_header(self, labels: Iterable[str]) -> str:
        """Encode the header line. Same format as a data row."""
        return self.encode_row(labels)
