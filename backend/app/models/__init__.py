"""Models package - re-exports for convenience."""

from backend.app.models.docs import DocumentText, ExtractionResult, ExtractionStatus, StoredDocument
from backend.app.models.settings import (
    PROMPT_SLOTS,
    PromptOverrides,
    PromptTemplates,
    SettingsUpdate,
    StoredSettings,
)

__all__ = [
    # Documents
    "StoredDocument",
    "DocumentText",
    "ExtractionResult",
    "ExtractionStatus",
    # Settings
    "PROMPT_SLOTS",
    "PromptTemplates",
    "StoredSettings",
    "PromptOverrides",
    "SettingsUpdate",
]
