"""Unit tests for CSV export and the import template."""

import csv
import io
from datetime import date, datetime, timezone

import pytest

from app.application.interfaces import KeyValueStore
from app.application.schemas import ClientCreate
from app.application.services import ClientExportService, ClientImportValidator, ClientStore
from app.application.services.client_export_service import (
    EXPORT_HEADERS,
    TEMPLATE_HEADERS,
    format_display_date,
)
from app.domain.entities import Client, ClientStatus
from app.infrastructure.csv_io import StdlibCsvRowReader


class FakeKeyValueStore(KeyValueStore):
    """In-memory fake key-value store."""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


@pytest.fixture
def exporter() -> ClientExportService:
    return ClientExportService()


class TestExport:
    async def test_export_after_units_update(self, exporter):
        store = ClientStore(FakeKeyValueStore())
        await store.load()
        created = await store.create(ClientCreate(
            name="John Smith",
            clinician="Dr. Wilson",
            assigned_date=date(2024, 3, 1),
            units_used=18,
            status=ClientStatus.NEW_AUTHORIZATION,
        ))
        await store.update_units(created.id, 20, 3)

        rows = _rows(exporter.export_csv(store.clients))

        assert rows[0] == EXPORT_HEADERS
        name, clinician, assigned, units, months, status, _ = rows[1]
        assert (name, clinician, assigned) == ("John Smith", "Dr. Wilson", "3/1/2024")
        assert (units, months, status) == ("20", "3", "New Authorization")

    def test_header_only_for_empty_collection(self, exporter):
        assert exporter.export_csv([]) == ",".join(EXPORT_HEADERS) + "\n"

    def test_last_updated_is_display_date(self, exporter):
        client = Client(
            name="A",
            clinician="B",
            assigned_date=datetime(2024, 12, 31, tzinfo=timezone.utc),
            units_used=1,
            status=ClientStatus.NEWLY_ASSIGNED,
            last_updated=datetime(2025, 1, 9, 15, 30, tzinfo=timezone.utc),
        )

        row = _rows(exporter.export_csv([client]))[1]

        assert row[2] == "12/31/2024"
        assert row[6] == "1/9/2025"

    def test_commas_and_quotes_are_quoted(self, exporter):
        client = Client(
            name='Smith, John "Jack"',
            clinician="Dr. Wilson",
            assigned_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            units_used=5,
            status=ClientStatus.CURRENT_AUTHORIZATION_NEW_LBS,
        )

        text = exporter.export_csv([client])

        assert '"Smith, John ""Jack"""' in text
        assert _rows(text)[1][0] == 'Smith, John "Jack"'
        assert _rows(text)[1][5] == "Current Authorization (New LBS)"

    def test_unknown_timezone_falls_back_to_utc(self):
        client = Client(
            name="A",
            clinician="B",
            assigned_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            units_used=1,
            status=ClientStatus.NEWLY_ASSIGNED,
            last_updated=datetime(2024, 3, 1, 23, 0, tzinfo=timezone.utc),
        )

        exporter = ClientExportService(display_timezone="Not/AZone")

        assert _rows(exporter.export_csv([client]))[1][6] == "3/1/2024"

    def test_format_display_date_has_no_padding(self):
        assert format_display_date(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "3/5/2024"


class TestTemplate:
    def test_template_headers(self, exporter):
        assert _rows(exporter.template_csv())[0] == TEMPLATE_HEADERS

    def test_template_is_importable(self, exporter):
        validator = ClientImportValidator(StdlibCsvRowReader())

        result = validator.validate(exporter.template_csv().encode("utf-8"))

        assert result.errors == []
        assert len(result.candidates) == 10
        assert {c.status for c in result.candidates} == set(ClientStatus)
