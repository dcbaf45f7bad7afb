"""Health check endpoints.

- Checks the storage directory is present and writable
- Reports whether the model provider credential is configured
- Returns honest status with component details
"""

import json
import os
from typing import Any

from fastapi import APIRouter, Response

from backend.app.config import Settings, get_settings
from backend.app.storage.settings_store import SettingsStore

router = APIRouter()


async def check_storage(settings: Settings) -> tuple[bool, str]:
    """Check the data directory can be created and written.

    Returns:
        (is_ok, status_message)
    """
    try:
        store = SettingsStore(settings.data_dir)
        await store.ensure_storage()
        if not os.access(store.docs_dir, os.W_OK):
            return (False, "error: not writable")
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_credentials(settings: Settings) -> tuple[bool, str]:
    """Check the model provider API key is configured.

    Returns:
        (is_ok, status_message)
    """
    api_key = settings.openai_api_key
    if api_key is None or not api_key.get_secret_value().strip():
        return (False, "missing")
    return (True, "configured")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Health check endpoint.

    Checks:
    - Storage directory usable
    - Model provider credential configured (reported, not fatal)

    Returns:
        200 with component status if storage is ok
        503 if storage is unusable
    """
    settings = get_settings()

    storage_ok, storage_status = await check_storage(settings)
    _, credentials_status = await check_credentials(settings)

    response_body = {
        "status": "ok" if storage_ok else "degraded",
        "components": {
            "storage": storage_status,
            "openai_api_key": credentials_status,
        },
    }

    if not storage_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
