from .client import (
    ClientCollectionResponse,
    ClientCreate,
    ClientResponse,
    ClientStatusUpdate,
    ClientUnitsUpdate,
    ImportCandidate,
    ImportCommitRequest,
    ImportPreviewResponse,
    StoredClient,
)

__all__ = [
    "ClientCollectionResponse",
    "ClientCreate",
    "ClientResponse",
    "ClientStatusUpdate",
    "ClientUnitsUpdate",
    "ImportCandidate",
    "ImportCommitRequest",
    "ImportPreviewResponse",
    "StoredClient",
]
