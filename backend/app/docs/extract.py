"""Plain-text extraction for uploaded reference documents.

Plain text is decoded directly, PDFs go through pdfplumber. Anything else is
accepted with empty text and status "unsupported" rather than rejected.
"""

import asyncio
import io
import logging

import pdfplumber

from backend.app.models.docs import ExtractionResult

logger = logging.getLogger(__name__)

TEXT_MIME = "text/plain"
PDF_MIME = "application/pdf"


def normalize_mime(mime: str | None) -> str:
    """Lowercase a MIME type and drop parameters (``; charset=...``)."""
    return (mime or "").split(";", 1)[0].strip().lower()


async def extract_text(content: bytes, mime: str | None) -> ExtractionResult:
    """Extract plain text from uploaded bytes.

    Never raises: PDF parser failures are logged and reported as
    status="failed" with empty text.

    Args:
        content: Raw uploaded bytes
        mime: Declared MIME type of the upload

    Returns:
        ExtractionResult with text and status
    """
    kind = normalize_mime(mime)

    if kind == TEXT_MIME:
        return ExtractionResult(text=content.decode("utf-8", errors="replace"))

    if kind == PDF_MIME:
        try:
            text = await asyncio.to_thread(_extract_pdf, content)
        except Exception as e:
            logger.error(f"Failed to parse PDF ({len(content)} bytes): {e}", exc_info=True)
            return ExtractionResult(status="failed", error=f"{type(e).__name__}: {e}")
        return ExtractionResult(text=text)

    logger.info(f"No text extractor for mime type {kind!r}, storing empty text")
    return ExtractionResult(status="unsupported")


def _extract_pdf(content: bytes) -> str:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages)
