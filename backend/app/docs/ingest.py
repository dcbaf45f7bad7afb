"""Document ingestion - extract text, persist the blob, register the record."""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from backend.app.docs.extract import extract_text, normalize_mime
from backend.app.models.docs import StoredDocument
from backend.app.storage.settings_store import SettingsStore
from backend.app.utils.metrics import documents_ingested_total

logger = logging.getLogger(__name__)


async def ingest_document(
    *,
    store: SettingsStore,
    content: bytes,
    name: str,
    mime: str,
    size: int,
) -> StoredDocument:
    """Ingest an uploaded file into the document registry.

    Extraction problems never fail ingestion: the record is created with
    whatever text could be extracted (possibly empty).

    Args:
        store: Settings store owning the registry and text blobs
        content: Raw uploaded bytes
        name: Original file name
        mime: Declared MIME type
        size: File size in bytes

    Returns:
        StoredDocument for the new record

    Raises:
        OSError: If the text blob or settings file cannot be written
    """
    doc_id = str(uuid4())

    extraction = await extract_text(content, mime)

    text_path = await store.write_text_blob(doc_id, extraction.text)

    record = StoredDocument(
        id=doc_id,
        name=name,
        size=size,
        mime=mime,
        text_path=str(text_path),
        uploaded_at=datetime.now(timezone.utc).isoformat(),
    )

    await store.append_document(record)

    documents_ingested_total.labels(
        mime=normalize_mime(mime) or "unknown", extraction=extraction.status
    ).inc()
    logger.info(
        f"Ingested document id={doc_id} name={name!r} size={size} "
        f"extraction={extraction.status} chars={len(extraction.text)}"
    )

    return record
