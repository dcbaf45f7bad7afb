"""Persisted settings models: prompt templates and the document registry."""

from pydantic import BaseModel, Field

from backend.app.models.docs import StoredDocument

DEFAULT_WEEK4_PROMPT = (
    "Simulate mild improvement with reduced redness and slightly improved vein visibility "
    "after 4 weeks of conservative treatment."
)
DEFAULT_WEEK8_PROMPT = (
    "Simulate moderate improvement in vein prominence and skin appearance after 8 weeks "
    "of treatment."
)
DEFAULT_WEEK12_PROMPT = (
    "Simulate significant improvement with visibly reduced varicose veins and healthier "
    "skin tone after 12 weeks of treatment."
)

PROMPT_SLOTS = ("week4", "week8", "week12")


class PromptTemplates(BaseModel):
    """The three named image-edit prompt templates."""

    week4: str = DEFAULT_WEEK4_PROMPT
    week8: str = DEFAULT_WEEK8_PROMPT
    week12: str = DEFAULT_WEEK12_PROMPT


class StoredSettings(BaseModel):
    """Settings object persisted as settings.json."""

    prompts: PromptTemplates = Field(default_factory=PromptTemplates)
    documents: list[StoredDocument] = Field(default_factory=list)


class PromptOverrides(BaseModel):
    """Partial prompt update; unset slots keep their stored value."""

    week4: str | None = None
    week8: str | None = None
    week12: str | None = None


class SettingsUpdate(BaseModel):
    """Request body for POST /settings."""

    prompts: PromptOverrides = Field(default_factory=PromptOverrides)
