"""Settings endpoints - GET /settings, POST /settings."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.models.settings import SettingsUpdate, StoredSettings
from backend.app.storage.settings_store import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=StoredSettings)
async def get_stored_settings(
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> StoredSettings:
    """Return prompt templates and the document registry."""
    return await store.read()


@router.post("", response_model=StoredSettings)
async def update_stored_settings(
    update: SettingsUpdate,
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> StoredSettings:
    """Merge partial prompt overrides into the stored settings.

    Args:
        update: Prompt slots to override; omitted slots keep their value
        store: Settings store

    Returns:
        The merged settings as persisted

    Raises:
        HTTPException: 500 if settings cannot be written
    """
    try:
        return await store.update_prompts(update.prompts)
    except OSError as e:
        logger.error(f"[POST /settings] failed to persist settings: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save settings.",
        ) from e
