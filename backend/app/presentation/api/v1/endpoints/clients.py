"""Client dashboard endpoints — list, add, update, delete, export."""

from fastapi import APIRouter, Depends, Response, status

from app.application.schemas.client import (
    ClientCollectionResponse,
    ClientCreate,
    ClientResponse,
    ClientStatusUpdate,
    ClientUnitsUpdate,
)
from app.application.services import ClientExportService, ClientStore
from app.infrastructure.dependencies import get_export_service, get_loaded_client_store

router = APIRouter(prefix="/clients", tags=["Clients"])


def collection_response(store: ClientStore) -> ClientCollectionResponse:
    """The full post-operation collection, as the dashboard re-renders it."""
    clients = store.clients
    return ClientCollectionResponse(
        clients=[ClientResponse.model_validate(c, from_attributes=True) for c in clients],
        total=len(clients),
        warning=store.persistence_warning,
    )


@router.get("", response_model=ClientCollectionResponse)
async def list_clients(
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Retrieve every client in display order."""
    return collection_response(store)


@router.post("", response_model=ClientCollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Add a single client from the add-client form."""
    await store.create(data)
    return collection_response(store)


@router.patch("/{client_id}/status", response_model=ClientCollectionResponse)
async def update_client_status(
    client_id: str,
    data: ClientStatusUpdate,
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Change a client's status. Unknown ids leave the collection unchanged."""
    await store.update_status(client_id, data.status)
    return collection_response(store)


@router.patch("/{client_id}/units", response_model=ClientCollectionResponse)
async def update_client_units(
    client_id: str,
    data: ClientUnitsUpdate,
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Change hours used and months assigned. Unknown ids leave the collection unchanged."""
    await store.update_units(client_id, data.units_used, data.months_assigned)
    return collection_response(store)


@router.delete("/{client_id}", response_model=ClientCollectionResponse)
async def delete_client(
    client_id: str,
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Delete a client. Unknown ids leave the collection unchanged."""
    await store.delete(client_id)
    return collection_response(store)


@router.get("/export")
async def export_clients(
    store: ClientStore = Depends(get_loaded_client_store),
    exporter: ClientExportService = Depends(get_export_service),
) -> Response:
    """Download the collection as ``clients.csv``."""
    return Response(
        content=exporter.export_csv(store.clients),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="clients.csv"'},
    )
