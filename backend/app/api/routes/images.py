"""Image endpoints - POST /edit-image, POST /analyze.

Input is validated before the credential check, so malformed requests never
reach the model provider.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel

from backend.app.docs.retriever import load_all_document_texts
from backend.app.llm.client import (
    ImageModelClient,
    MissingCredentialError,
    UpstreamError,
    get_llm_client,
)
from backend.app.media.images import (
    InvalidImageError,
    is_accepted_image_type,
    normalize_image_mime,
    read_image_size,
    to_data_url,
)
from backend.app.storage.settings_store import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])


class EditImageResponse(BaseModel):
    """Response for POST /edit-image."""

    image: str


class AnalyzeResponse(BaseModel):
    """Response for POST /analyze."""

    assessment: str


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _require_image(image: UploadFile | None, missing_detail: str) -> tuple[UploadFile, str]:
    """Validate presence and type of the uploaded image; return it with its MIME type."""
    if image is None:
        raise _bad_request(missing_detail)

    mime = normalize_image_mime(image.content_type)
    if not is_accepted_image_type(mime):
        raise _bad_request("Only PNG and JPG images are supported.")
    return image, mime


async def _client_or_500() -> ImageModelClient:
    try:
        return await get_llm_client()
    except MissingCredentialError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e


def _upstream_failure(endpoint: str, e: UpstreamError) -> HTTPException:
    logger.error(f"[POST {endpoint}] upstream failure (status={e.status_code}): {e}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/edit-image", response_model=EditImageResponse)
async def edit_image(
    image: Annotated[UploadFile | None, File()] = None,
    prompt: Annotated[str | None, Form()] = None,
) -> EditImageResponse:
    """Edit an uploaded photo per a text prompt.

    Args:
        image: PNG or JPEG upload
        prompt: Non-empty edit instruction

    Returns:
        Edited image as a PNG data URL

    Raises:
        HTTPException: 400 for invalid input, 500 if no API key, 502 on upstream failure
    """
    upload, mime = _require_image(image, "An image file is required.")

    if prompt is None or not prompt.strip():
        raise _bad_request("A non-empty prompt is required.")

    content = await upload.read()
    try:
        width, height = read_image_size(content)
    except InvalidImageError as e:
        raise _bad_request(str(e)) from e

    client = await _client_or_500()

    extension = "png" if mime == "image/png" else "jpg"
    filename = upload.filename or f"upload.{extension}"

    logger.info(f"[POST /edit-image] {filename} {width}x{height} ({mime}), prompt_chars={len(prompt)}")

    try:
        edited = await client.edit_image(image=content, mime=mime, filename=filename, prompt=prompt)
    except UpstreamError as e:
        raise _upstream_failure("/edit-image", e) from e

    return EditImageResponse(image=to_data_url(edited, "image/png"))


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_image(
    store: Annotated[SettingsStore, Depends(get_settings_store)],
    image: Annotated[UploadFile | None, File()] = None,
) -> AnalyzeResponse:
    """Assess an uploaded photo using every stored document as context.

    Args:
        store: Settings store (document registry)
        image: PNG or JPEG upload

    Returns:
        Free-text assessment

    Raises:
        HTTPException: 400 for invalid input, 500 if no API key, 502 on upstream failure
    """
    upload, mime = _require_image(image, "An image file is required for analysis.")

    content = await upload.read()

    client = await _client_or_500()

    documents = await load_all_document_texts(store)
    logger.info(f"[POST /analyze] {len(content)} bytes ({mime}), {len(documents)} context document(s)")

    try:
        assessment = await client.analyze_image(image=content, mime=mime, documents=documents)
    except UpstreamError as e:
        raise _upstream_failure("/analyze", e) from e

    return AnalyzeResponse(assessment=assessment)
