"""Document retriever - load extracted texts as analysis context."""

import logging
from collections.abc import Iterable

from backend.app.models.docs import DocumentText
from backend.app.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)


async def load_document_texts(store: SettingsStore, document_ids: Iterable[str]) -> list[DocumentText]:
    """Load extracted texts for the given document ids.

    Results follow the settings document order, not the order of
    ``document_ids``. Unknown ids are omitted and unreadable blobs are
    skipped with a warning.

    Args:
        store: Settings store holding the registry
        document_ids: Ids to load

    Returns:
        List of DocumentText in registry order
    """
    wanted = set(document_ids)
    settings = await store.read()
    selected = [doc for doc in settings.documents if doc.id in wanted]

    contents: list[DocumentText] = []
    for doc in selected:
        try:
            text = await store.read_text_blob(doc.text_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read document {doc.id} ({doc.text_path}): {e}")
            continue
        contents.append(DocumentText(id=doc.id, name=doc.name, text=text))

    return contents


async def load_all_document_texts(store: SettingsStore) -> list[DocumentText]:
    """Load extracted texts for every registered document."""
    settings = await store.read()
    return await load_document_texts(store, [doc.id for doc in settings.documents])
