"""CSV row reader backed by the standard library ``csv`` module.

Handles encoding fallback, delimiter auto-detection and blank-line
skipping. Validation of the cell contents is not its concern.
"""

import csv
import io
import logging

from app.application.interfaces import CsvRowReader, CsvTable
from app.domain.exceptions import CsvParseError

logger = logging.getLogger(__name__)

# Supported delimiters in priority order
SUPPORTED_DELIMITERS = (",", ";", "\t", "|")


def _decode(content: bytes) -> str:
    """Decode as UTF-8 (BOM tolerated), falling back to Latin-1."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("CSV is not valid UTF-8, decoding as Latin-1")
        return content.decode("latin-1")


def detect_delimiter(text: str) -> str:
    """Guess the delimiter from the first few lines, defaulting to a comma."""
    lines = text.splitlines()
    sample = "\n".join(lines[:5])
    try:
        return csv.Sniffer().sniff(sample, delimiters="".join(SUPPORTED_DELIMITERS)).delimiter
    except csv.Error:
        pass

    # Fallback: the delimiter that occurs most often in the header line
    header = lines[0] if lines else ""
    counts = {delim: header.count(delim) for delim in SUPPORTED_DELIMITERS}
    best = max(counts, key=counts.get)
    return best if counts[best] else ","


class StdlibCsvRowReader(CsvRowReader):
    """Infrastructure adapter turning raw CSV bytes into header-keyed rows."""

    def read(self, content: bytes) -> CsvTable:
        text = _decode(content)
        if "\x00" in text:
            raise CsvParseError("file contains NUL bytes; it does not look like a text CSV")
        if not text.strip():
            return CsvTable(headers=[])

        delimiter = detect_delimiter(text)
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)

        headers: list[str] | None = None
        rows: list[dict[str, str]] = []
        try:
            for cells in reader:
                if not any(cell.strip() for cell in cells):
                    continue
                if headers is None:
                    headers = [cell.strip() for cell in cells]
                    continue
                row: dict[str, str] = {}
                for index, header in enumerate(headers):
                    row.setdefault(header, cells[index] if index < len(cells) else "")
                rows.append(row)
        except csv.Error as exc:
            raise CsvParseError(f"line {reader.line_num}: {exc}") from exc

        logger.debug(
            "Read CSV: delimiter=%r, %d columns, %d data rows",
            delimiter,
            len(headers or []),
            len(rows),
        )
        return CsvTable(headers=headers or [], rows=rows)
