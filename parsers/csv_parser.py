"""
CSV parser for product uploads.

Reads the header line and then yields one dict per data row, lazily.
The reader is single-pass: once consumed it cannot be restarted
without reopening the stream.
"""

import csv
import io
from typing import BinaryIO, Iterator, Optional
import structlog

from exceptions import FormatError

logger = structlog.get_logger(__name__)

ImportRow = dict[str, str]


class CsvRowReader:
    """
    Lazy reader over an uploaded CSV byte stream.

    Usage:
        reader = CsvRowReader(stream)
        headers = reader.read_header()
        while (row := reader.next_row()) is not None:
            ...

    Rows whose field count differs from the header are padded with
    empty strings / truncated, unless strict is set, in which case
    FormatError is raised.
    """

    def __init__(self, stream: BinaryIO, strict: bool = False):
        # utf-8-sig drops a leading BOM if present
        self._text = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
        self._reader = csv.reader(self._text)
        self._strict = strict
        self._headers: Optional[list[str]] = None
        self._row_number = 1  # header is row 1

    @property
    def headers(self) -> list[str]:
        """Header names, reading them on first access."""
        if self._headers is None:
            return self.read_header()
        return self._headers

    @property
    def row_number(self) -> int:
        """1-based number of the last row handed out (header = 1)."""
        return self._row_number

    def read_header(self) -> list[str]:
        """
        Read the first line and split it into column names.

        Returns:
            Ordered list of header names (whitespace-trimmed)

        Raises:
            FormatError: If the stream is empty, undecodable or unparsable
        """
        if self._headers is not None:
            return self._headers

        try:
            first = next(self._reader, None)
        except (csv.Error, UnicodeDecodeError) as e:
            logger.error("csv_header_unreadable", error=str(e))
            raise FormatError(
                "Invalid CSV file format.",
                details={"original_error": str(e)}
            ) from e

        headers = [h.strip() for h in first] if first else []
        if not any(headers):
            logger.warning("csv_header_missing")
            raise FormatError("Invalid CSV file format.", details={"reason": "no header row"})

        self._headers = headers
        logger.debug("csv_header_read", columns=headers)
        return headers

    def next_row(self) -> Optional[ImportRow]:
        """
        Produce the next row mapping, or None when the stream is exhausted.

        Blank lines are skipped.

        Raises:
            FormatError: On unreadable input, or on a field-count
                mismatch when strict
        """
        headers = self.headers

        while True:
            try:
                fields = next(self._reader, None)
            except (csv.Error, UnicodeDecodeError) as e:
                logger.error("csv_row_unreadable", row=self._row_number + 1, error=str(e))
                raise FormatError(
                    "Unable to read the uploaded file.",
                    details={"row": self._row_number + 1, "original_error": str(e)}
                ) from e

            if fields is None:
                return None

            self._row_number += 1
            if not fields or (len(fields) == 1 and not fields[0].strip()):
                continue
            break

        if len(fields) != len(headers):
            if self._strict:
                raise FormatError(
                    "Row field count does not match the header.",
                    details={
                        "row": self._row_number,
                        "expected": len(headers),
                        "found": len(fields),
                    }
                )
            logger.warning(
                "csv_row_field_count_mismatch",
                row=self._row_number,
                expected=len(headers),
                found=len(fields)
            )
            fields = (fields + [""] * len(headers))[:len(headers)]

        return dict(zip(headers, fields))

    def __iter__(self) -> Iterator[ImportRow]:
        while True:
            row = self.next_row()
            if row is None:
                return
            yield row
