"""Integration tests for the file-backed settings store."""

import asyncio
import json

import pytest

from backend.app.models.docs import StoredDocument
from backend.app.models.settings import (
    DEFAULT_WEEK4_PROMPT,
    DEFAULT_WEEK8_PROMPT,
    DEFAULT_WEEK12_PROMPT,
    PromptOverrides,
    PromptTemplates,
    StoredSettings,
)
from backend.app.storage.settings_store import SettingsStore


def _record(doc_id: str, name: str = "notes.txt") -> StoredDocument:
    return StoredDocument(
        id=doc_id,
        name=name,
        size=5,
        mime="text/plain",
        text_path=f"/tmp/{doc_id}.txt",
        uploaded_at="2025-01-01T00:00:00+00:00",
    )


@pytest.mark.asyncio
async def test_ensure_storage_is_idempotent(store: SettingsStore) -> None:
    """Test that ensure_storage creates the docs dir and can be called repeatedly."""
    await store.ensure_storage()
    await store.ensure_storage()

    assert store.docs_dir.is_dir()
    assert store.data_dir.is_dir()


@pytest.mark.asyncio
async def test_read_missing_file_returns_defaults(store: SettingsStore) -> None:
    """Test that a missing settings file yields the built-in defaults."""
    settings = await store.read()

    assert settings == StoredSettings()
    assert settings.prompts.week4 == DEFAULT_WEEK4_PROMPT
    assert settings.prompts.week8 == DEFAULT_WEEK8_PROMPT
    assert settings.prompts.week12 == DEFAULT_WEEK12_PROMPT
    assert settings.documents == []


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", '"just a string"', "null", ""])
async def test_read_corrupt_file_returns_defaults(store: SettingsStore, raw: str) -> None:
    """Test that unparseable or wrongly shaped files degrade to defaults."""
    await store.ensure_storage()
    store.settings_path.write_text(raw, encoding="utf-8")

    settings = await store.read()

    assert settings == StoredSettings()


@pytest.mark.asyncio
async def test_read_undecodable_bytes_returns_defaults(store: SettingsStore) -> None:
    """Test that a non-UTF-8 settings file degrades to defaults."""
    await store.ensure_storage()
    store.settings_path.write_bytes(b"\xff\xfe\x00garbage")

    assert await store.read() == StoredSettings()


@pytest.mark.asyncio
async def test_read_merges_partial_prompts_over_defaults(store: SettingsStore) -> None:
    """Test that missing or non-string prompt slots fall back to defaults."""
    await store.ensure_storage()
    store.settings_path.write_text(
        json.dumps({"prompts": {"week4": "custom", "week8": 42}}), encoding="utf-8"
    )

    settings = await store.read()

    assert settings.prompts.week4 == "custom"
    assert settings.prompts.week8 == DEFAULT_WEEK8_PROMPT
    assert settings.prompts.week12 == DEFAULT_WEEK12_PROMPT
    assert settings.documents == []


@pytest.mark.asyncio
async def test_read_skips_malformed_document_entries(store: SettingsStore) -> None:
    """Test that one bad record does not discard the rest of the registry."""
    await store.ensure_storage()
    good = _record("a").model_dump(by_alias=True)
    store.settings_path.write_text(
        json.dumps({"documents": [good, {"id": "b"}, "junk"]}), encoding="utf-8"
    )

    settings = await store.read()

    assert [doc.id for doc in settings.documents] == ["a"]
    assert settings.prompts == PromptTemplates()


@pytest.mark.asyncio
async def test_read_skips_duplicate_document_ids(
    store: SettingsStore, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that a repeated id keeps only the first record."""
    await store.ensure_storage()
    first = _record("a", name="first.txt").model_dump(by_alias=True)
    again = _record("a", name="again.txt").model_dump(by_alias=True)
    other = _record("b").model_dump(by_alias=True)
    store.settings_path.write_text(json.dumps({"documents": [first, again, other]}), encoding="utf-8")

    settings = await store.read()

    assert [(doc.id, doc.name) for doc in settings.documents] == [("a", "first.txt"), ("b", "notes.txt")]
    assert any("duplicate" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_read_non_list_documents_becomes_empty(store: SettingsStore) -> None:
    """Test that a non-list documents field is treated as empty."""
    await store.ensure_storage()
    store.settings_path.write_text(json.dumps({"documents": {"a": 1}}), encoding="utf-8")

    settings = await store.read()

    assert settings.documents == []


@pytest.mark.asyncio
async def test_write_then_read_round_trips(store: SettingsStore) -> None:
    """Test that write(s); read() returns s exactly."""
    await store.ensure_storage()
    original = StoredSettings(
        prompts=PromptTemplates(week4="a", week8="b ✓", week12="c"),
        documents=[_record("1", "one.txt"), _record("2", "two.pdf")],
    )

    await store.write(original)
    loaded = await store.read()

    assert loaded == original


@pytest.mark.asyncio
async def test_write_uses_camel_case_keys(store: SettingsStore) -> None:
    """Test the on-disk layout of document records."""
    await store.ensure_storage()
    await store.write(StoredSettings(documents=[_record("x")]))

    data = json.loads(store.settings_path.read_text(encoding="utf-8"))

    assert set(data) == {"prompts", "documents"}
    assert set(data["prompts"]) == {"week4", "week8", "week12"}
    assert set(data["documents"][0]) == {"id", "name", "size", "mime", "textPath", "uploadedAt"}


@pytest.mark.asyncio
async def test_write_leaves_no_temp_files(store: SettingsStore) -> None:
    """Test that the temp-then-rename write cleans up after itself."""
    await store.ensure_storage()

    await store.write(StoredSettings())
    await store.write(StoredSettings())

    assert sorted(p.name for p in store.data_dir.iterdir()) == ["docs", "settings.json"]


@pytest.mark.asyncio
async def test_write_without_storage_dir_raises(store: SettingsStore) -> None:
    """Test that write fails with OSError when the directory does not exist."""
    with pytest.raises(OSError):
        await store.write(StoredSettings())


@pytest.mark.asyncio
async def test_update_prompts_keeps_other_slots(store: SettingsStore) -> None:
    """Test partial prompt overrides."""
    await store.ensure_storage()
    await store.write(StoredSettings(prompts=PromptTemplates(week4="a", week8="b", week12="c")))

    updated = await store.update_prompts(PromptOverrides(week4="X"))

    assert updated.prompts == PromptTemplates(week4="X", week8="b", week12="c")
    assert await store.read() == updated


@pytest.mark.asyncio
async def test_concurrent_appends_do_not_lose_records(store: SettingsStore) -> None:
    """Test that appends from concurrent tasks in one process all survive."""
    await store.ensure_storage()

    await asyncio.gather(*(store.append_document(_record(str(i))) for i in range(10)))

    settings = await store.read()
    assert sorted(doc.id for doc in settings.documents) == [str(i) for i in range(10)]


@pytest.mark.asyncio
async def test_text_blob_round_trip(store: SettingsStore) -> None:
    """Test writing and reading an extracted-text blob."""
    await store.ensure_storage()

    path = await store.write_text_blob("abc", "hello\nworld")

    assert path == store.docs_dir / "abc.txt"
    assert await store.read_text_blob(path) == "hello\nworld"
