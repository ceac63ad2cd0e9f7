"""Declarative base for the key-value table."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Metadata owner for ``kv_entries``; ``create_all`` runs at startup."""
