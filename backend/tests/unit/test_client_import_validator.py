"""Unit tests for the CSV import validator."""

from datetime import datetime, timezone

import pytest

from app.application.services.client_import_validator import (
    ClientImportValidator,
    normalize_header,
    parse_assigned_date,
    parse_units,
    resolve_columns,
)
from app.domain.entities import CLIENT_STATUSES, ClientStatus
from app.infrastructure.csv_io import StdlibCsvRowReader

HEADER = "Name,Assigned Clinician,Assigned Date,Units Used,Status"


def _csv(*lines: str, header: str = HEADER) -> bytes:
    return "\n".join([header, *lines]).encode("utf-8")


@pytest.fixture
def validator() -> ClientImportValidator:
    return ClientImportValidator(StdlibCsvRowReader())


# ── Happy path ───────────────────────────────────────────────────────

class TestValidImport:
    def test_single_row_becomes_candidate(self, validator):
        result = validator.validate(_csv("John Smith,Dr. Wilson,2024-03-01,18,New Authorization"))

        assert result.errors == []
        assert result.importable is True
        assert len(result.candidates) == 1
        client = result.candidates[0]
        assert client.name == "John Smith"
        assert client.clinician == "Dr. Wilson"
        assert client.assigned_date == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert client.units_used == 18
        assert client.status is ClientStatus.NEW_AUTHORIZATION
        assert client.months_assigned == 1
        assert client.id

    def test_candidates_keep_source_order_and_unique_ids(self, validator):
        result = validator.validate(_csv(
            "A,Dr. One,2024-03-01,1,Newly Assigned",
            "B,Dr. Two,2024-03-02,2,Client Hospitalized",
            "C,Dr. Three,2024-03-03,3,Current Authorization (New LBS)",
        ))

        assert [c.name for c in result.candidates] == ["A", "B", "C"]
        assert len({c.id for c in result.candidates}) == 3

    def test_values_are_trimmed(self, validator):
        result = validator.validate(_csv("  Jane Doe ,  Dr. Chen , 2024-03-01 , 7 , Newly Assigned "))

        client = result.candidates[0]
        assert client.name == "Jane Doe"
        assert client.clinician == "Dr. Chen"
        assert client.units_used == 7
        assert client.status is ClientStatus.NEWLY_ASSIGNED

    def test_unit_boundaries_accepted(self, validator):
        result = validator.validate(_csv(
            "A,Dr. One,2024-03-01,0,Newly Assigned",
            "B,Dr. Two,2024-03-01,960,Newly Assigned",
        ))

        assert [c.units_used for c in result.candidates] == [0, 960]

    def test_us_date_format(self, validator):
        result = validator.validate(_csv("A,Dr. One,03/15/2024,5,Newly Assigned"))

        assert result.candidates[0].assigned_date == datetime(2024, 3, 15, tzinfo=timezone.utc)

    def test_blank_lines_are_skipped(self, validator):
        content = _csv("", "A,Dr. One,2024-03-01,5,Newly Assigned", "", "")

        result = validator.validate(content)

        assert len(result.candidates) == 1

    def test_extra_columns_are_ignored(self, validator):
        content = _csv(
            "A,Dr. One,2024-03-01,5,Newly Assigned,ignored",
            header=HEADER + ",Notes",
        )

        result = validator.validate(content)

        assert result.importable is True


# ── Header aliases ───────────────────────────────────────────────────

class TestHeaderAliases:
    @pytest.mark.parametrize("units_header", ["Units", "units used", "UnitsUsed"])
    def test_units_aliases_are_equivalent(self, validator, units_header):
        header = f"Name,Clinician,Date,{units_header},Status"
        ok = validator.validate(_csv("A,Dr. One,2024-03-01,12,Newly Assigned", header=header))
        bad = validator.validate(_csv("A,Dr. One,2024-03-01,-5,Newly Assigned", header=header))

        assert ok.candidates[0].units_used == 12
        assert bad.errors == ["Row 1: Invalid units (must be a positive number)"]

    def test_alternate_spellings_resolve(self, validator):
        header = "Client Name,assigned_clinician,Assignment Date,UNITS,Client Status"

        result = validator.validate(_csv("A,Dr. One,2024-03-01,4,Newly Assigned", header=header))

        assert result.importable is True

    def test_column_order_does_not_matter(self, validator):
        header = "Status,Units,Date,Clinician,Name"

        result = validator.validate(_csv("Newly Assigned,4,2024-03-01,Dr. One,A", header=header))

        assert result.candidates[0].name == "A"
        assert result.candidates[0].clinician == "Dr. One"

    def test_missing_column_reported_for_every_row(self, validator):
        header = "Name,Assigned Clinician,Assigned Date,Units Used"

        result = validator.validate(_csv("A,Dr. One,2024-03-01,4", "B,Dr. Two,2024-03-01,4", header=header))

        assert result.candidates == []
        assert len(result.errors) == 2
        assert result.errors[0] == (
            "Row 1: Missing or invalid column headers. "
            "Required columns: Name, Assigned Clinician, Assigned Date, Units Used, Status"
        )
        assert result.errors[1].startswith("Row 2: Missing or invalid column headers")

    def test_normalize_header(self):
        assert normalize_header("  Units Used ") == "unitsused"
        assert normalize_header("Assigned-Clinician") == "assignedclinician"

    def test_resolve_columns_picks_first_match(self):
        columns = resolve_columns(["Date", "Assigned Date", "Name"])

        assert columns["assigned_date"] == "Date"
        assert columns["name"] == "Name"
        assert columns["status"] is None


# ── Row errors ───────────────────────────────────────────────────────

class TestRowErrors:
    def test_negative_units(self, validator):
        result = validator.validate(_csv("John Smith,Dr. Wilson,2024-03-01,-5,New Authorization"))

        assert result.errors == ["Row 1: Invalid units (must be a positive number)"]
        assert result.candidates == []

    @pytest.mark.parametrize("units", ["abc", "12.5", "1e3", "18 hours"])
    def test_non_integer_units(self, validator, units):
        result = validator.validate(_csv(f"A,Dr. One,2024-03-01,{units},Newly Assigned"))

        assert result.errors == ["Row 1: Invalid units (must be a positive number)"]

    def test_units_above_maximum(self, validator):
        result = validator.validate(_csv("A,Dr. One,2024-03-01,961,Newly Assigned"))

        assert result.errors == ["Row 1: Invalid units (must be between 0 and 960)"]

    def test_unknown_status_lists_allowed_values(self, validator):
        result = validator.validate(_csv("A,Dr. One,2024-03-01,5,Unknown"))

        assert len(result.errors) == 1
        message = result.errors[0]
        assert message.startswith("Row 1: Invalid status. Must be one of: ")
        for status in CLIENT_STATUSES:
            assert status in message

    @pytest.mark.parametrize("status", ["new authorization", "NEW AUTHORIZATION", "Discharged", "Current"])
    def test_status_must_match_exactly(self, validator, status):
        result = validator.validate(_csv(f"A,Dr. One,2024-03-01,5,{status}"))

        assert result.errors[0].startswith("Row 1: Invalid status")

    def test_invalid_date(self, validator):
        result = validator.validate(_csv("A,Dr. One,March 1st,5,Newly Assigned"))

        assert result.errors == ["Row 1: Invalid date format. Use YYYY-MM-DD or MM/DD/YYYY"]

    def test_missing_value(self, validator):
        result = validator.validate(_csv(",Dr. One,2024-03-01,5,Newly Assigned"))

        assert result.errors == ["Row 1: Missing required fields"]

    def test_short_row_is_missing_fields(self, validator):
        result = validator.validate(_csv("A,Dr. One,2024-03-01"))

        assert result.errors == ["Row 1: Missing required fields"]

    def test_whitespace_only_value_is_missing(self, validator):
        result = validator.validate(_csv("A,   ,2024-03-01,5,Newly Assigned"))

        assert result.errors == ["Row 1: Missing required fields"]

    def test_first_failed_check_wins(self, validator):
        result = validator.validate(_csv("A,Dr. One,not-a-date,-1,Unknown"))

        assert result.errors == ["Row 1: Invalid units (must be a positive number)"]


# ── Atomicity and edge cases ─────────────────────────────────────────

class TestBatchOutcome:
    def test_one_bad_row_rejects_whole_batch(self, validator):
        result = validator.validate(_csv(
            "A,Dr. One,2024-03-01,5,Newly Assigned",
            "B,Dr. Two,2024-03-01,5,Unknown",
            "C,Dr. Three,2024-03-01,5,Newly Assigned",
        ))

        assert result.candidates == []
        assert result.importable is False
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Row 2:")

    def test_errors_follow_row_order(self, validator):
        result = validator.validate(_csv(
            "A,Dr. One,2024-03-01,-1,Newly Assigned",
            "B,Dr. Two,2024-03-01,5,Newly Assigned",
            "C,Dr. Three,bad,5,Newly Assigned",
        ))

        assert [e.split(":")[0] for e in result.errors] == ["Row 1", "Row 3"]

    def test_row_numbers_ignore_blank_lines(self, validator):
        result = validator.validate(_csv("", "A,Dr. One,2024-03-01,-1,Newly Assigned"))

        assert result.errors == ["Row 1: Invalid units (must be a positive number)"]

    def test_header_only_file_is_not_importable(self, validator):
        result = validator.validate(HEADER.encode())

        assert result.candidates == []
        assert result.errors == []
        assert result.importable is False

    def test_empty_file_is_not_importable(self, validator):
        result = validator.validate(b"")

        assert result.candidates == []
        assert result.errors == []
        assert result.importable is False

    def test_structural_failure_is_single_error(self, validator):
        content = b'Name,Status\n"John"x,New Authorization\n'

        result = validator.validate(content)

        assert len(result.errors) == 1
        assert result.errors[0].startswith("Error parsing CSV:")
        assert result.candidates == []

    def test_binary_content_is_single_error(self, validator):
        result = validator.validate(b"Name,Status\x00\x00\x01\n")

        assert len(result.errors) == 1
        assert result.errors[0].startswith("Error parsing CSV:")


# ── Parsing helpers ──────────────────────────────────────────────────

class TestParsers:
    @pytest.mark.parametrize(
        "text,expected",
        [("0", 0), ("18", 18), ("+7", 7), ("-5", -5), ("", None), ("7.0", None), ("x", None)],
    )
    def test_parse_units(self, text, expected):
        assert parse_units(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["2024-03-01", "03/01/2024", "3/1/2024", "2024-03-01T00:00:00Z", "2024-03-01T23:30:00+00:00"],
    )
    def test_parse_assigned_date_variants(self, text):
        assert parse_assigned_date(text) == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_parse_assigned_date_uses_utc_calendar_day(self):
        # 22:00 in UTC-05:00 is already the next day in UTC
        assert parse_assigned_date("2024-03-01T22:00:00-05:00") == datetime(
            2024, 3, 2, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("text", ["13/45/2024", "2024-02-30", "yesterday", "01-03-2024x"])
    def test_parse_assigned_date_rejects(self, text):
        assert parse_assigned_date(text) is None
