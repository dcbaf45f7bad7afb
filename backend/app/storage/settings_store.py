"""File-backed settings store - settings.json plus one text blob per document.

Single-process deployment: read-modify-write helpers serialize through one
asyncio.Lock per store. Across processes the last writer wins.
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from backend.app.config import get_settings
from backend.app.models.docs import StoredDocument
from backend.app.models.settings import (
    PROMPT_SLOTS,
    PromptOverrides,
    PromptTemplates,
    StoredSettings,
)

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"
DOCS_DIRNAME = "docs"


class SettingsStore:
    """Owns settings.json and the extracted-text directory under ``data_dir``."""

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self.docs_dir = self.data_dir / DOCS_DIRNAME
        self.settings_path = self.data_dir / SETTINGS_FILENAME
        self._lock = asyncio.Lock()

    async def ensure_storage(self) -> None:
        """Create the storage directories if they do not exist yet."""
        await asyncio.to_thread(self.docs_dir.mkdir, parents=True, exist_ok=True)

    async def read(self) -> StoredSettings:
        """Load settings, degrading to defaults on any read or parse problem."""
        try:
            raw = await asyncio.to_thread(self.settings_path.read_text, encoding="utf-8")
            parsed = json.loads(raw)
        except FileNotFoundError:
            return StoredSettings()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load {self.settings_path}, using defaults: {e}")
            return StoredSettings()

        return merge_over_defaults(parsed)

    async def write(self, settings: StoredSettings) -> None:
        """Replace settings.json with the full serialized object.

        Raises:
            OSError: If the storage directory is missing or not writable
        """
        payload = json.dumps(settings.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
        await asyncio.to_thread(_replace_file, self.settings_path, payload)

    async def append_document(self, record: StoredDocument) -> StoredSettings:
        """Append a document record to the registry (read-modify-write)."""
        return await self._update(
            lambda current: current.model_copy(update={"documents": [*current.documents, record]})
        )

    async def update_prompts(self, overrides: PromptOverrides) -> StoredSettings:
        """Apply partial prompt overrides and persist the merged settings."""

        def apply(current: StoredSettings) -> StoredSettings:
            changes = overrides.model_dump(exclude_none=True)
            prompts = current.prompts.model_copy(update=changes)
            return current.model_copy(update={"prompts": prompts})

        return await self._update(apply)

    async def write_text_blob(self, doc_id: str, text: str) -> Path:
        """Persist extracted text for a document and return its path."""
        path = self.docs_dir / f"{doc_id}.txt"
        await asyncio.to_thread(path.write_text, text, encoding="utf-8")
        return path

    async def read_text_blob(self, path: Path | str) -> str:
        """Read an extracted-text blob.

        Raises:
            OSError: If the blob is missing or unreadable
        """
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def _update(self, mutate: Callable[[StoredSettings], StoredSettings]) -> StoredSettings:
        async with self._lock:
            current = await self.read()
            updated = mutate(current)
            await self.write(updated)
            return updated


def merge_over_defaults(data: Any) -> StoredSettings:
    """Build StoredSettings from loaded JSON, field by field over the defaults.

    A missing or non-string prompt slot keeps its default, a missing or
    non-list document list becomes empty, and malformed document entries are
    dropped. Later entries repeating an earlier id are dropped as well.
    """
    if not isinstance(data, dict):
        logger.warning("Settings file does not hold a JSON object, using defaults")
        return StoredSettings()

    raw_prompts = data.get("prompts")
    prompt_values: dict[str, str] = {}
    if isinstance(raw_prompts, dict):
        for slot in PROMPT_SLOTS:
            value = raw_prompts.get(slot)
            if isinstance(value, str):
                prompt_values[slot] = value

    raw_documents = data.get("documents")
    documents: list[StoredDocument] = []
    seen_ids: set[str] = set()
    if isinstance(raw_documents, list):
        for entry in raw_documents:
            try:
                record = StoredDocument.model_validate(entry)
            except ValidationError as e:
                logger.warning(f"Skipping malformed document record in settings: {e.error_count()} error(s)")
                continue
            if record.id in seen_ids:
                logger.warning(f"Skipping duplicate document record in settings: id={record.id}")
                continue
            seen_ids.add(record.id)
            documents.append(record)

    return StoredSettings(prompts=PromptTemplates(**prompt_values), documents=documents)


def _replace_file(path: Path, content: str) -> None:
    """Write to a temp file in the same directory, then rename over ``path``."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


@lru_cache
def _store_for(data_dir: Path) -> SettingsStore:
    return SettingsStore(data_dir)


async def get_settings_store() -> SettingsStore:
    """FastAPI dependency: process-wide store with storage directories in place."""
    store = _store_for(get_settings().data_dir)
    await store.ensure_storage()
    return store
