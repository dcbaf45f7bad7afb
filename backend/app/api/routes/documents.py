"""Document endpoints - POST /documents, GET /documents."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from backend.app.docs.ingest import ingest_document
from backend.app.models.docs import StoredDocument
from backend.app.storage.settings_store import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentListResponse(BaseModel):
    """Response for GET /documents and POST /documents."""

    documents: list[StoredDocument]


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> DocumentListResponse:
    """List registered documents in upload order."""
    settings = await store.read()
    return DocumentListResponse(documents=settings.documents)


@router.post("", response_model=DocumentListResponse, status_code=status.HTTP_201_CREATED)
async def upload_documents(
    store: Annotated[SettingsStore, Depends(get_settings_store)],
    documents: Annotated[list[UploadFile] | None, File()] = None,
) -> DocumentListResponse:
    """Ingest one or more uploaded reference documents.

    Plain text and PDF are extracted; other types are stored with empty text.

    Args:
        store: Settings store
        documents: Uploaded files (multipart field ``documents``)

    Returns:
        Records created for this request, in upload order

    Raises:
        HTTPException: 400 if no files were sent, 500 if storage fails
    """
    if not documents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No documents uploaded.",
        )

    saved: list[StoredDocument] = []
    try:
        for upload in documents:
            content = await upload.read()
            saved.append(
                await ingest_document(
                    store=store,
                    content=content,
                    name=upload.filename or "document",
                    mime=upload.content_type or "application/octet-stream",
                    size=len(content),
                )
            )
    except OSError as e:
        logger.error(f"[POST /documents] storage failure after {len(saved)} document(s): {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store document.",
        ) from e

    logger.info(f"[POST /documents] ingested {len(saved)} document(s)")
    return DocumentListResponse(documents=saved)
