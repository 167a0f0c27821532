"""Output stream handling.

RecordWriter is the only writer of the output stream. It writes the header
at most once, before any data line, and flushes after every line so an
interrupted run leaves a truncated but parseable file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from fugotcha.common.csv_encoder import CsvEncoder
from fugotcha.common.exceptions import OutputDestinationConflict
from fugotcha.common.records import Record

if TYPE_CHECKING:
    from fugotcha.driver.session import ScrapeSession

logger = logging.getLogger(__name__)


def open_destination(path: str | Path) -> TextIO:
    """Open ``path`` for writing, refusing to overwrite it.

    Args:
        path: File to create.

    Returns:
        A text stream opened in exclusive-create mode.

    Raises:
        OutputDestinationConflict: If ``path`` already exists.
    """
    try:
        # newline="" leaves the encoder's line terminator untouched
        return open(path, "x", encoding="utf-8", newline="")
    except FileExistsError as e:
        raise OutputDestinationConflict(str(path)) from e


class RecordWriter:
    """Writes encoded records to a text stream.

    Args:
        stream: Destination stream.
        encoder: Encoder used for the header and every record.
    """

    def __init__(self, stream: TextIO, encoder: CsvEncoder) -> None:
        self.stream = stream
        self.encoder = encoder
        self.header_written = False
        self.records_written = 0

    def write_header(self, labels: Record) -> None:
        """Write the header line.

        Raises:
            RuntimeError: If a header or any record was already written.
        """
        if self.header_written:
            raise RuntimeError("Header already written")
        if self.records_written:
            raise RuntimeError("Header must be written before any record")
        self._write(self.encoder.encode_header(labels))
        self.header_written = True

    def write_record(self, record: Record) -> None:
        """Write one record as a single line."""
        self._write(self.encoder.encode_row(record))
        self.records_written += 1

    def _write(self, line: str) -> None:
        self.stream.write(line)
        self.stream.flush()


def write_session(session: ScrapeSession, writer: RecordWriter) -> int:
    """Run ``session`` and write its header and records.

    Records are written as the session yields them, so everything written
    before a fatal error stays in the stream.

    Returns:
        The number of data lines written.
    """
    header = session.header()
    if header is not None:
        writer.write_header(header)

    for record in session.run():
        writer.write_record(record)

    logger.info(f"Wrote {writer.records_written} record(s)")
    return writer.records_written
