"""CSV import validator — turns an uploaded file into a preview batch or an error report.

Pipeline:
  1. Parse the file into header-keyed rows      (CsvRowReader port)
  2. Resolve the five canonical columns          (alias table, normalized headers)
  3. Validate and coerce each row                (required, units, status, date)
  4. All-or-nothing result                       (any error discards the batch)
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.application.interfaces import CsvRowReader
from app.domain.entities import CLIENT_STATUSES, MAX_UNITS_USED, Client, ClientStatus
from app.domain.exceptions import CsvParseError
from app.infrastructure.logging.colored_logger import ImportStage, PipelineLogger

logger = logging.getLogger(__name__)
plog = PipelineLogger("ClientImportValidator")

# Canonical field → accepted header spellings
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "client name", "clientname", "client"),
    "clinician": ("clinician", "assigned clinician", "assignedclinician"),
    "assigned_date": ("assigned date", "assigneddate", "date", "assignment date"),
    "units_used": ("units", "units used", "unitsused"),
    "status": ("status", "client status"),
}

REQUIRED_COLUMNS = "Name, Assigned Clinician, Assigned Date, Units Used, Status"

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def normalize_header(header: str) -> str:
    """Lowercase and drop whitespace and punctuation: ``"Units Used"`` → ``"unitsused"``."""
    return re.sub(r"[\W_]+", "", header.lower())


_NORMALIZED_ALIASES: dict[str, frozenset[str]] = {
    canonical: frozenset(normalize_header(alias) for alias in aliases)
    for canonical, aliases in HEADER_ALIASES.items()
}


def resolve_columns(headers: list[str]) -> dict[str, str | None]:
    """Map each canonical field to the first header (as written) that matches it."""
    resolved: dict[str, str | None] = {}
    for canonical, aliases in _NORMALIZED_ALIASES.items():
        resolved[canonical] = next(
            (header for header in headers if normalize_header(header) in aliases),
            None,
        )
    return resolved


def parse_units(text: str) -> int | None:
    """Parse a whole number, or return None when ``text`` is not one."""
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def parse_assigned_date(text: str) -> datetime | None:
    """Parse a calendar date into a UTC-midnight timestamp.

    Accepts ``YYYY-MM-DD``, ``MM/DD/YYYY`` and ISO-8601 timestamps (the
    UTC calendar date is kept). Returns None when nothing matches.
    """
    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=timezone.utc)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


@dataclass
class ImportValidationResult:
    """Outcome of validating one file: candidates or errors, never both."""

    candidates: list[Client] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def importable(self) -> bool:
        """True only for an error-free, non-empty batch."""
        return not self.errors and bool(self.candidates)


class ClientImportValidator:
    """Application service that validates CSV uploads into client candidates.

    Row errors are returned as data; nothing here raises for bad content.
    """

    def __init__(self, reader: CsvRowReader, max_units_used: int = MAX_UNITS_USED):
        self._reader = reader
        self._max_units_used = max_units_used

    def validate(self, content: bytes, filename: str = "upload.csv") -> ImportValidationResult:
        """Validate raw CSV content into a preview batch or a list of row errors."""
        plog.separator(f"Import: {filename}")

        try:
            with plog.timed_step(ImportStage.PARSE, f"Parsing '{filename}'", size_bytes=len(content)):
                table = self._reader.read(content)
        except CsvParseError as exc:
            return ImportValidationResult(errors=[f"Error parsing CSV: {exc.reason}"])

        if not table.rows:
            plog.step_complete(ImportStage.COMPLETE, "No data rows — nothing to import")
            return ImportValidationResult()

        columns = resolve_columns(table.headers)
        missing = [canonical for canonical, header in columns.items() if header is None]
        if missing:
            plog.step_error(ImportStage.HEADERS, f"Unmatched columns: {', '.join(missing)}")
        else:
            plog.detail("Columns resolved", **columns)

        candidates: list[Client] = []
        errors: list[str] = []
        with plog.timed_step(ImportStage.VALIDATE, "Validating rows", rows=len(table.rows)):
            for row_number, row in enumerate(table.rows, start=1):
                if missing:
                    errors.append(
                        f"Row {row_number}: Missing or invalid column headers. "
                        f"Required columns: {REQUIRED_COLUMNS}"
                    )
                    continue
                outcome = self._validate_row(row_number, row, columns)
                if isinstance(outcome, str):
                    errors.append(outcome)
                else:
                    candidates.append(outcome)
        plog.stats(rows=len(table.rows), valid=len(candidates), invalid=len(errors))

        if errors:
            plog.step_error(
                ImportStage.ERROR,
                f"Rejected '{filename}': {len(errors)} of {len(table.rows)} rows invalid",
            )
            return ImportValidationResult(errors=errors)

        plog.step_complete(ImportStage.COMPLETE, f"Preview ready: {len(candidates)} clients")
        return ImportValidationResult(candidates=candidates)

    def _validate_row(
        self, row_number: int, row: dict[str, str], columns: dict[str, str | None]
    ) -> Client | str:
        """Return a candidate for a valid row, or the error message for the first failed check."""
        values = {canonical: (row.get(header) or "").strip() for canonical, header in columns.items()}

        if not all(values.values()):
            return f"Row {row_number}: Missing required fields"

        units = parse_units(values["units_used"])
        if units is None or units < 0:
            return f"Row {row_number}: Invalid units (must be a positive number)"
        if units > self._max_units_used:
            return f"Row {row_number}: Invalid units (must be between 0 and {self._max_units_used})"

        if values["status"] not in CLIENT_STATUSES:
            return f"Row {row_number}: Invalid status. Must be one of: {', '.join(CLIENT_STATUSES)}"

        assigned_date = parse_assigned_date(values["assigned_date"])
        if assigned_date is None:
            return f"Row {row_number}: Invalid date format. Use YYYY-MM-DD or MM/DD/YYYY"

        return Client(
            name=values["name"],
            clinician=values["clinician"],
            assigned_date=assigned_date,
            units_used=units,
            status=ClientStatus(values["status"]),
            months_assigned=1,
        )
