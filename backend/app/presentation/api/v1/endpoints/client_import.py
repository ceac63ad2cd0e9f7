"""CSV import endpoints — template, preview, commit."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status

from app.application.schemas.client import (
    ClientCollectionResponse,
    ClientResponse,
    ImportCommitRequest,
    ImportPreviewResponse,
)
from app.application.services import ClientExportService, ClientImportValidator, ClientStore
from app.config import get_settings
from app.infrastructure.dependencies import (
    get_export_service,
    get_import_validator,
    get_loaded_client_store,
)
from app.presentation.api.v1.endpoints.clients import collection_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients/import", tags=["Client Import"])


@router.get("/template")
async def download_template(
    exporter: ClientExportService = Depends(get_export_service),
) -> Response:
    """Download a CSV template with the required headers and sample rows."""
    return Response(
        content=exporter.template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="client-import-template.csv"'},
    )


@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile,
    validator: ClientImportValidator = Depends(get_import_validator),
) -> ImportPreviewResponse:
    """Validate an uploaded CSV without touching the collection.

    Returns either the full candidate batch or one error per bad row.
    """
    max_bytes = get_settings().max_upload_size_mb * 1024 * 1024
    content = await file.read()
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File exceeds the {get_settings().max_upload_size_mb} MB upload limit",
        )

    result = validator.validate(content, filename=file.filename or "upload.csv")
    return ImportPreviewResponse(
        filename=file.filename,
        clients=[ClientResponse.model_validate(c, from_attributes=True) for c in result.candidates],
        errors=result.errors,
        importable=result.importable,
    )


@router.post("", response_model=ClientCollectionResponse)
async def commit_import(
    data: ImportCommitRequest,
    store: ClientStore = Depends(get_loaded_client_store),
) -> ClientCollectionResponse:
    """Append a previewed batch to the collection."""
    if not data.clients:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to import",
        )
    merged = await store.import_merge(data.clients)
    logger.info("Committed import of %d clients", len(merged))
    return collection_response(store)
