from .client_export_service import ClientExportService
from .client_import_validator import ClientImportValidator, ImportValidationResult
from .client_store import ClientStore

__all__ = [
    "ClientExportService",
    "ClientImportValidator",
    "ClientStore",
    "ImportValidationResult",
]
