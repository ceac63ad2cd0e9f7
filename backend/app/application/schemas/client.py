"""Pydantic DTOs (Data Transfer Objects) for the Client feature."""

from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.domain.entities import MAX_UNITS_USED, ClientStatus


def to_iso_timestamp(value: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ── Requests ─────────────────────────────────────────────────────────

class ClientCreate(BaseModel):
    """Schema for adding a single client from the add-client form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200, examples=["John Smith"])
    clinician: str = Field(..., min_length=1, max_length=200, examples=["Dr. Sarah Wilson"])
    assigned_date: date = Field(..., examples=["2024-03-01"])
    units_used: int = Field(0, ge=0, le=MAX_UNITS_USED, examples=[18])
    months_assigned: int = Field(1, ge=1, examples=[1])
    status: ClientStatus = Field(..., examples=[ClientStatus.NEW_AUTHORIZATION])


class ClientStatusUpdate(BaseModel):
    """Schema for changing a client's status."""

    status: ClientStatus


class ClientUnitsUpdate(BaseModel):
    """Schema for changing hours used and the months they cover."""

    units_used: int = Field(..., ge=0, le=MAX_UNITS_USED)
    months_assigned: int = Field(..., ge=1)


class ImportCandidate(BaseModel):
    """One previewed client sent back for commit.

    Re-validated on the way in; imported data is never trusted to conform.
    A missing or zero ``months_assigned`` is backfilled to 1 by the store.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str | None = Field(None, max_length=36)
    name: str = Field(..., min_length=1, max_length=200)
    clinician: str = Field(..., min_length=1, max_length=200)
    assigned_date: datetime
    units_used: int = Field(..., ge=0, le=MAX_UNITS_USED)
    months_assigned: int | None = Field(None, ge=0)
    status: ClientStatus
    last_updated: datetime | None = None


class ImportCommitRequest(BaseModel):
    """Schema for committing a previewed import batch."""

    clients: list[ImportCandidate]


# ── Responses ────────────────────────────────────────────────────────

class ClientResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    clinician: str
    assigned_date: datetime
    units_used: int
    months_assigned: int
    status: ClientStatus
    last_updated: datetime

    model_config = {"from_attributes": True}


class ClientCollectionResponse(BaseModel):
    """The full collection after an operation, plus any persistence warning."""

    clients: list[ClientResponse]
    total: int
    warning: str | None = None


class ImportPreviewResponse(BaseModel):
    """Result of validating an uploaded CSV — either clients or errors, never both."""

    filename: str | None = None
    clients: list[ClientResponse] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    importable: bool = False


# ── Persistence ──────────────────────────────────────────────────────

class StoredClient(BaseModel):
    """One client as written to the persistent blob (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    clinician: str = Field(..., min_length=1)
    assigned_date: datetime = Field(..., alias="assignedDate")
    units_used: int = Field(..., alias="unitsUsed", ge=0)
    months_assigned: int = Field(1, alias="monthsAssigned", ge=1)
    status: ClientStatus
    last_updated: datetime = Field(..., alias="lastUpdated")

    @field_serializer("assigned_date", "last_updated")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso_timestamp(value)
