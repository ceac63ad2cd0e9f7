from .client import (
    CLIENT_STATUSES,
    Client,
    ClientStatus,
    DEFAULT_MONTHS_ASSIGNED,
    MAX_UNITS_USED,
    backfill_months_assigned,
    ensure_utc,
    normalize_months_assigned,
    utc_now,
)

__all__ = [
    "CLIENT_STATUSES",
    "Client",
    "ClientStatus",
    "DEFAULT_MONTHS_ASSIGNED",
    "MAX_UNITS_USED",
    "backfill_months_assigned",
    "ensure_utc",
    "normalize_months_assigned",
    "utc_now",
]
