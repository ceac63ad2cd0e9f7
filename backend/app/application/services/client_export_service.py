"""CSV export of the client collection, plus the import template download."""

import csv
import io
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain.entities import Client

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "Name",
    "Assigned Clinician",
    "Assigned Date",
    "Hours Used",
    "Months",
    "Status",
    "Last Updated",
]

TEMPLATE_HEADERS = ["Name", "Assigned Clinician", "Assigned Date", "Units Used", "Status"]

TEMPLATE_ROWS = [
    ["John Smith", "Dr. Sarah Wilson", "2024-03-01", "18", "New Authorization"],
    ["Emma Johnson", "Dr. Michael Chen", "2024-03-02", "15", "Current Authorization"],
    ["William Brown", "Dr. Emily Taylor", "2024-03-03", "20", "Newly Assigned"],
    ["Olivia Davis", "Dr. James Anderson", "2024-03-04", "12", "Current Authorization"],
    ["James Wilson", "Dr. Lisa Martinez", "2024-03-05", "8", "Client Hospitalized"],
    ["Sophia Garcia", "Dr. Robert Johnson", "2024-03-06", "16", "Current Authorization"],
    ["Lucas Miller", "Dr. Jennifer Lee", "2024-03-07", "19", "New Authorization"],
    ["Isabella Moore", "Dr. David Clark", "2024-03-08", "14", "Current Authorization (New LBS)"],
    ["Mason Taylor", "Dr. Maria Rodriguez", "2024-03-09", "17", "Newly Assigned"],
    ["Ethan Thomas", "Dr. Patricia Brown", "2024-03-11", "11", "Frequent Caregiver Cancellations"],
]


def format_display_date(value: datetime, tz: tzinfo = timezone.utc) -> str:
    """Render a timestamp as ``M/D/YYYY`` in ``tz``."""
    local = value.astimezone(tz)
    return f"{local.month}/{local.day}/{local.year}"


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone '%s' — using UTC", name)
        return timezone.utc


def _write_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


class ClientExportService:
    """Projects the client collection into CSV for people to read.

    Output is for humans, not a re-import guarantee. Cells containing
    commas, quotes or newlines are quoted.
    """

    def __init__(self, display_timezone: str = "UTC"):
        self._tz = _resolve_timezone(display_timezone)

    def export_csv(self, clients: Iterable[Client]) -> str:
        rows = [
            [
                client.name,
                client.clinician,
                # a calendar date stored at UTC midnight
                format_display_date(client.assigned_date, timezone.utc),
                client.units_used,
                client.months_assigned,
                client.status.value,
                format_display_date(client.last_updated, self._tz),
            ]
            for client in clients
        ]
        logger.info("Exporting %d clients to CSV", len(rows))
        return _write_csv(EXPORT_HEADERS, rows)

    def template_csv(self) -> str:
        """The downloadable import template with sample rows."""
        return _write_csv(TEMPLATE_HEADERS, TEMPLATE_ROWS)
