"""Test that tunables are accessible from Settings and not duplicated."""

from pathlib import Path

from backend.app.config import Settings, get_settings
from backend.app.models.settings import PROMPT_SLOTS, PromptTemplates


def test_settings_accessible() -> None:
    """Test that Settings can be imported and accessed."""
    settings = get_settings()
    assert settings is not None
    assert get_settings() is settings


def test_model_defaults() -> None:
    """Test that model names have defaults."""
    settings = Settings()
    assert settings.openai_image_model
    assert settings.openai_vision_model


def test_analysis_limits_accessible() -> None:
    """Test that analysis limits are positive."""
    settings = Settings()
    assert settings.analysis_max_tokens > 0
    assert 0 <= settings.analysis_temperature <= 2
    assert settings.doc_excerpt_chars == 3000


def test_timeout_constants_accessible() -> None:
    """Test that timeouts are positive."""
    settings = Settings()
    assert settings.upstream_timeout_sec > 0
    assert settings.image_fetch_timeout_sec > 0


def test_data_dir_from_environment(monkeypatch, tmp_path: Path) -> None:
    """Test that DATA_DIR overrides the storage root."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path))

    assert Settings().data_dir == tmp_path


def test_prompt_slots_match_template_fields() -> None:
    """Test that the slot list and the prompts model agree."""
    assert set(PROMPT_SLOTS) == set(PromptTemplates.model_fields)
