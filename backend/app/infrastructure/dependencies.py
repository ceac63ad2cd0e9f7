"""FastAPI dependency injection — wires infrastructure to application layer."""

from functools import lru_cache

from app.config import Settings, get_settings
from app.application.interfaces import KeyValueStore
from app.application.services import (
    ClientExportService,
    ClientImportValidator,
    ClientStore,
)
from app.infrastructure.csv_io import StdlibCsvRowReader
from app.infrastructure.storage.json_file_key_value_store import JsonFileKeyValueStore


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Select the persistence adapter named by ``storage_backend``."""
    if settings.storage_backend == "database":
        from app.infrastructure.database.repositories import SQLAlchemyKeyValueStore
        from app.infrastructure.database.session import async_session_factory

        return SQLAlchemyKeyValueStore(async_session_factory)
    return JsonFileKeyValueStore(storage_dir=settings.storage_dir)


@lru_cache
def get_client_store() -> ClientStore:
    """Process-wide client store — one collection, one writer."""
    settings = get_settings()
    return ClientStore(build_key_value_store(settings), storage_key=settings.storage_key)


async def get_loaded_client_store() -> ClientStore:
    """Provides the client store, loading it on first use."""
    store = get_client_store()
    if not store.loaded:
        await store.load()
    return store


def get_import_validator() -> ClientImportValidator:
    """Provides a ClientImportValidator backed by the stdlib CSV reader."""
    return ClientImportValidator(StdlibCsvRowReader())


def get_export_service() -> ClientExportService:
    """Provides a ClientExportService using the configured display timezone."""
    return ClientExportService(display_timezone=get_settings().display_timezone)
