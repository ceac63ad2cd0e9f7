"""Domain entity — a client receiving clinical services."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class ClientStatus(str, Enum):
    """Closed set of case-management classifications.

    Any status may change to any other; there is no transition graph.
    """

    NEW_AUTHORIZATION = "New Authorization"
    CURRENT_AUTHORIZATION = "Current Authorization"
    CURRENT_AUTHORIZATION_NEW_LBS = "Current Authorization (New LBS)"
    NEWLY_ASSIGNED = "Newly Assigned"
    CLIENT_HOSPITALIZED = "Client Hospitalized"
    FREQUENT_CAREGIVER_CANCELLATIONS = "Frequent Caregiver Cancellations"


CLIENT_STATUSES: tuple[str, ...] = tuple(s.value for s in ClientStatus)

DEFAULT_MONTHS_ASSIGNED = 1
MAX_UNITS_USED = 960


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds (the persisted precision)."""
    return ensure_utc(datetime.now(timezone.utc))


def ensure_utc(value: datetime) -> datetime:
    """Normalize a timestamp to UTC at the persisted millisecond precision.

    Naive timestamps are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def normalize_months_assigned(value: Any) -> int:
    """Return ``value`` when it is a positive integer, else the default of 1."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_MONTHS_ASSIGNED
    return value


def backfill_months_assigned(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a raw client mapping with ``monthsAssigned`` guaranteed to be set.

    Records written before the field existed carry no value (or a falsy
    one); they get the default. Idempotent.
    """
    record = dict(raw)
    record["monthsAssigned"] = normalize_months_assigned(record.get("monthsAssigned"))
    return record


@dataclass
class Client:
    """Core domain entity: one tracked client and their hours against an allotment."""

    name: str
    clinician: str
    assigned_date: datetime
    units_used: int
    status: ClientStatus
    months_assigned: int = DEFAULT_MONTHS_ASSIGNED
    id: str = field(default_factory=lambda: str(uuid4()))
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.status = ClientStatus(self.status)
        self.assigned_date = ensure_utc(self.assigned_date)
        self.last_updated = ensure_utc(self.last_updated)
        self.months_assigned = normalize_months_assigned(self.months_assigned)

    def change_status(self, status: ClientStatus) -> None:
        """Replace the status and refresh ``last_updated``."""
        self.status = ClientStatus(status)
        self._touch()

    def change_units(self, units_used: int, months_assigned: int) -> None:
        """Replace hours used and months assigned, refreshing ``last_updated``."""
        self.units_used = units_used
        self.months_assigned = normalize_months_assigned(months_assigned)
        self._touch()

    def _touch(self) -> None:
        # never move backwards, even if the clock does
        self.last_updated = max(utc_now(), self.last_updated)
