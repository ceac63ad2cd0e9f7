"""Client store — the authoritative in-memory client collection.

Every mutation writes the full collection through to the KeyValueStore
port before returning. The collection is loaded once at startup; an
absent, unreadable or corrupt blob yields an empty collection.
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from app.application.interfaces import KeyValueStore
from app.application.schemas.client import ClientCreate, ImportCandidate, StoredClient
from app.domain.entities import (
    Client,
    ClientStatus,
    backfill_months_assigned,
    ensure_utc,
    utc_now,
)
from app.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "clients"


# ── Blob format ──────────────────────────────────────────────────────

def serialize_clients(clients: Iterable[Client]) -> str:
    """Encode clients as the persisted JSON array (camelCase keys)."""
    payload = [_to_stored(client).model_dump(by_alias=True, mode="json") for client in clients]
    return json.dumps(payload)


def deserialize_clients(blob: str | None) -> list[Client]:
    """Decode a persisted blob, dropping records that do not conform.

    Missing or corrupt blobs decode to an empty list. Every record gets
    the ``monthsAssigned`` backfill before validation.
    """
    if not blob:
        return []
    try:
        raw_records = json.loads(blob)
    except json.JSONDecodeError as exc:
        logger.warning("Persisted client data is not valid JSON, starting empty: %s", exc)
        return []
    if not isinstance(raw_records, list):
        logger.warning("Persisted client data is not a list, starting empty")
        return []

    clients: list[Client] = []
    seen_ids: set[str] = set()
    for index, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning("Skipping persisted client #%d: not an object", index)
            continue
        try:
            stored = StoredClient.model_validate(backfill_months_assigned(raw))
        except ValidationError as exc:
            logger.warning(
                "Skipping persisted client #%d (id=%s): %d invalid field(s)",
                index, raw.get("id"), exc.error_count(),
            )
            continue
        if stored.id in seen_ids:
            logger.warning("Skipping persisted client #%d: duplicate id %s", index, stored.id)
            continue
        seen_ids.add(stored.id)
        clients.append(
            Client(
                id=stored.id,
                name=stored.name,
                clinician=stored.clinician,
                assigned_date=stored.assigned_date,
                units_used=stored.units_used,
                months_assigned=stored.months_assigned,
                status=stored.status,
                last_updated=stored.last_updated,
            )
        )
    return clients


# ── Store ────────────────────────────────────────────────────────────

class ClientStore:
    """Owns the client collection and exposes its only mutation paths.

    Callers receive copies; the list itself never leaves the store.
    Lookups by an unknown id are silent no-ops.
    """

    def __init__(self, kv_store: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY):
        self._kv_store = kv_store
        self._storage_key = storage_key
        self._clients: list[Client] = []
        self._loaded = False
        self._lock = asyncio.Lock()
        self._persistence_warning: str | None = None

    # ── Read access ─────────────────────────────────────────────────

    @property
    def clients(self) -> list[Client]:
        """Snapshot of the collection in display (insertion) order."""
        return [replace(client) for client in self._clients]

    @property
    def persistence_warning(self) -> str | None:
        """Message from the last failed write, cleared by the next successful one."""
        return self._persistence_warning

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, client_id: str) -> Client | None:
        """Return a copy of one client, or None."""
        client = self._find(client_id)
        return replace(client) if client else None

    def serialize(self) -> str:
        """The collection in its persisted blob format."""
        return serialize_clients(self._clients)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def load(self) -> None:
        """Populate the collection from persistent storage. Runs once."""
        async with self._lock:
            if self._loaded:
                return
            try:
                blob = await self._kv_store.get(self._storage_key)
            except StorageError as exc:
                logger.warning("Client storage unavailable, starting empty: %s", exc)
                blob = None
            self._clients = deserialize_clients(blob)
            self._loaded = True
        logger.info("Loaded %d clients from key '%s'", len(self._clients), self._storage_key)

    # ── Mutations ───────────────────────────────────────────────────

    async def create(self, data: ClientCreate) -> Client:
        """Append a new client built from already-validated form data."""
        async with self._lock:
            client = Client(
                name=data.name,
                clinician=data.clinician,
                assigned_date=_as_utc_midnight(data.assigned_date),
                units_used=data.units_used,
                months_assigned=data.months_assigned,
                status=data.status,
            )
            self._clients.append(client)
            await self._persist()
        logger.info("Created client %s", client.id)
        return replace(client)

    async def update_status(self, client_id: str, status: ClientStatus) -> None:
        async with self._lock:
            client = self._find(client_id)
            if client is None:
                logger.debug("update_status: unknown client %s ignored", client_id)
                return
            client.change_status(status)
            await self._persist()

    async def update_units(self, client_id: str, units_used: int, months_assigned: int) -> None:
        async with self._lock:
            client = self._find(client_id)
            if client is None:
                logger.debug("update_units: unknown client %s ignored", client_id)
                return
            client.change_units(units_used, months_assigned)
            await self._persist()

    async def import_merge(self, candidates: Iterable[Client | ImportCandidate]) -> list[Client]:
        """Append an import batch in order.

        Records are not de-duplicated: importing the same person twice
        yields two clients. Only colliding ids are replaced.
        """
        async with self._lock:
            taken = {client.id for client in self._clients}
            merged: list[Client] = []
            for candidate in candidates:
                client = _to_client(candidate)
                if client.id in taken:
                    logger.info("Import candidate id %s already in use, assigning a new one", client.id)
                    client.id = str(uuid4())
                taken.add(client.id)
                merged.append(client)
            if not merged:
                return []
            self._clients.extend(merged)
            await self._persist()
        logger.info("Imported %d clients (collection now %d)", len(merged), len(self._clients))
        return [replace(client) for client in merged]

    async def delete(self, client_id: str) -> None:
        async with self._lock:
            remaining = [client for client in self._clients if client.id != client_id]
            if len(remaining) == len(self._clients):
                logger.debug("delete: unknown client %s ignored", client_id)
                return
            self._clients = remaining
            await self._persist()
        logger.info("Deleted client %s", client_id)

    # ── Internals ───────────────────────────────────────────────────

    def _find(self, client_id: str) -> Client | None:
        return next((client for client in self._clients if client.id == client_id), None)

    async def _persist(self) -> None:
        """Write the whole collection; a failure is kept as a warning, not raised."""
        try:
            await self._kv_store.set(self._storage_key, self.serialize())
        except StorageError as exc:
            logger.warning("Could not persist clients: %s", exc)
            self._persistence_warning = (
                "Changes are applied but could not be saved to storage "
                f"and may be lost on restart ({exc.message})"
            )
        else:
            self._persistence_warning = None


def _as_utc_midnight(value: date | datetime) -> datetime:
    """Keep only the calendar date (in UTC for timestamps) at UTC midnight."""
    if isinstance(value, datetime):
        value = ensure_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _to_stored(client: Client) -> StoredClient:
    return StoredClient(
        id=client.id,
        name=client.name,
        clinician=client.clinician,
        assigned_date=client.assigned_date,
        units_used=client.units_used,
        months_assigned=client.months_assigned,
        status=client.status,
        last_updated=client.last_updated,
    )


def _to_client(candidate: Client | ImportCandidate) -> Client:
    if isinstance(candidate, Client):
        return replace(candidate)
    return Client(
        id=candidate.id or str(uuid4()),
        name=candidate.name,
        clinician=candidate.clinician,
        assigned_date=_as_utc_midnight(candidate.assigned_date),
        units_used=candidate.units_used,
        months_assigned=candidate.months_assigned,
        status=candidate.status,
        last_updated=candidate.last_updated or utc_now(),
    )
