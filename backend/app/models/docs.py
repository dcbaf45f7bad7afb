"""Document domain models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StoredDocument(BaseModel):
    """Metadata record for one ingested document.

    Serialized with camelCase keys (``textPath``, ``uploadedAt``) both in
    settings.json and in API responses.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    size: int = Field(..., ge=0, description="Uploaded file size in bytes")
    mime: str
    text_path: str = Field(..., alias="textPath", description="Path of the extracted-text blob")
    uploaded_at: str = Field(..., alias="uploadedAt", description="ISO 8601 UTC timestamp")


class DocumentText(BaseModel):
    """Extracted text of a document, used as retrieval context."""

    id: str
    name: str
    text: str


ExtractionStatus = Literal["ok", "failed", "unsupported"]


class ExtractionResult(BaseModel):
    """Outcome of converting uploaded bytes into plain text.

    ``text`` is always a string; ``status`` tells an empty document apart
    from a failed or skipped extraction.
    """

    text: str = ""
    status: ExtractionStatus = "ok"
    error: str | None = None
