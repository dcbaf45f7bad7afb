"""Helper functions for UI - API client calls and before/after compositing."""

import base64
import io
from typing import Any

import httpx
from PIL import Image

DEFAULT_TIMEOUT = 180.0  # image edits can take well over a minute

PROMPT_LABELS = {
    "week4": "Week 4",
    "week8": "Week 8",
    "week12": "Week 12",
}


class ApiError(Exception):
    """Backend returned a non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable ``detail`` out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return f"Request failed with status {response.status_code}."

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        # FastAPI validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict))
    return f"Request failed with status {response.status_code}."


def _json_or_raise(response: httpx.Response) -> dict[str, Any]:
    if not response.is_success:
        raise ApiError(_error_message(response), status_code=response.status_code)
    result: dict[str, Any] = response.json()
    return result


def get_settings(backend_url: str) -> dict[str, Any]:
    """Call GET /settings.

    Returns:
        Settings dict with ``prompts`` and ``documents``
    """
    response = httpx.get(f"{backend_url}/settings", timeout=30.0)
    return _json_or_raise(response)


def update_prompts(backend_url: str, prompts: dict[str, str]) -> dict[str, Any]:
    """Call POST /settings with prompt overrides.

    Args:
        backend_url: Backend base URL (e.g. http://localhost:8000)
        prompts: Subset of week4/week8/week12 to override

    Returns:
        Merged settings dict
    """
    response = httpx.post(f"{backend_url}/settings", json={"prompts": prompts}, timeout=30.0)
    return _json_or_raise(response)


def list_documents(backend_url: str) -> list[dict[str, Any]]:
    """Call GET /documents."""
    response = httpx.get(f"{backend_url}/documents", timeout=30.0)
    documents: list[dict[str, Any]] = _json_or_raise(response).get("documents", [])
    return documents


def upload_documents(backend_url: str, files: list[tuple[str, bytes, str]]) -> list[dict[str, Any]]:
    """Call POST /documents with one or more files.

    Args:
        backend_url: Backend base URL
        files: (name, content, mime) per file

    Returns:
        Newly created document records
    """
    multipart = [("documents", (name, content, mime)) for name, content, mime in files]
    response = httpx.post(f"{backend_url}/documents", files=multipart, timeout=DEFAULT_TIMEOUT)
    documents: list[dict[str, Any]] = _json_or_raise(response).get("documents", [])
    return documents


def edit_image(backend_url: str, name: str, content: bytes, mime: str, prompt: str) -> str:
    """Call POST /edit-image.

    Returns:
        Edited image as a data URL

    Raises:
        ApiError: If the backend rejects the request or the upstream call fails
    """
    response = httpx.post(
        f"{backend_url}/edit-image",
        files={"image": (name, content, mime)},
        data={"prompt": prompt},
        timeout=DEFAULT_TIMEOUT,
    )
    image: str = _json_or_raise(response)["image"]
    return image


def analyze_image(backend_url: str, name: str, content: bytes, mime: str) -> str:
    """Call POST /analyze.

    Returns:
        Assessment text
    """
    response = httpx.post(
        f"{backend_url}/analyze",
        files={"image": (name, content, mime)},
        timeout=DEFAULT_TIMEOUT,
    )
    assessment: str = _json_or_raise(response)["assessment"]
    return assessment


def decode_data_url(data_url: str) -> bytes:
    """Decode a base64 ``data:`` URL into raw bytes.

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    return base64.b64decode(payload)


def compose_comparison(before: bytes, after: bytes, split_percent: int) -> Image.Image:
    """Composite before/after images side by side at a vertical split.

    Pixels left of the split come from ``before``, the rest from ``after``.
    ``after`` is scaled to the size of ``before`` for display only.

    Args:
        before: Original image bytes
        after: Edited image bytes
        split_percent: Split position, 0-100 (clamped)

    Returns:
        RGB image with a thin divider line at the split
    """
    split_percent = max(0, min(100, split_percent))

    with Image.open(io.BytesIO(before)) as raw_before:
        base = raw_before.convert("RGB")
    with Image.open(io.BytesIO(after)) as raw_after:
        edited = raw_after.convert("RGB")

    if edited.size != base.size:
        edited = edited.resize(base.size)

    width, height = base.size
    split_x = round(width * split_percent / 100)

    composite = edited.copy()
    if split_x > 0:
        composite.paste(base.crop((0, 0, split_x, height)), (0, 0))

    if 0 < split_x < width:
        divider = Image.new("RGB", (max(1, width // 200), height), (255, 255, 255))
        composite.paste(divider, (min(split_x, width - divider.width), 0))

    return composite
