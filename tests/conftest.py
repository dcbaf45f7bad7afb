"""Shared pytest fixtures for all test suites."""

import io
import struct
import zlib
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from backend.app.main import app
from backend.app.models.docs import DocumentText
from backend.app.storage.settings_store import SettingsStore, get_settings_store


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 6), color: str = "red") -> bytes:
    """Render a small solid-colour image in the given format."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_png_header(width: int, height: int) -> bytes:
    """PNG with a valid IHDR declaring width x height but no real pixel data."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", zlib.compress(b"")) + chunk(b"IEND", b"")


class FakeImageClient:
    """In-memory stand-in for OpenAIClient that records its calls."""

    def __init__(self, edited: bytes = b"edited-png", assessment: str = "Findings: none."):
        self.edited = edited
        self.assessment = assessment
        self.edit_calls: list[dict] = []
        self.analyze_calls: list[dict] = []

    async def edit_image(self, *, image: bytes, mime: str, filename: str, prompt: str) -> bytes:
        self.edit_calls.append({"image": image, "mime": mime, "filename": filename, "prompt": prompt})
        return self.edited

    async def analyze_image(self, *, image: bytes, mime: str, documents: list[DocumentText]) -> str:
        self.analyze_calls.append({"image": image, "mime": mime, "documents": documents})
        return self.assessment


@pytest.fixture
def store(tmp_path: Path) -> SettingsStore:
    """Settings store rooted in a per-test temp dir (directories not created yet)."""
    return SettingsStore(tmp_path / "data")


@pytest.fixture
def png_bytes() -> bytes:
    """Small valid PNG."""
    return make_image_bytes("PNG")


@pytest.fixture
def client(store: SettingsStore) -> Iterator[TestClient]:
    """Test client whose store dependency points at the per-test store."""

    async def override_store() -> SettingsStore:
        await store.ensure_storage()
        return store

    app.dependency_overrides[get_settings_store] = override_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_settings_store, None)


@pytest.fixture
def make_image():
    """Factory for small images: make_image("JPEG", size=(4, 4))."""
    return make_image_bytes


@pytest.fixture
def fake_llm() -> FakeImageClient:
    """Recording fake model client."""
    return FakeImageClient()


@pytest.fixture
def oversized_png() -> bytes:
    """PNG header declaring 20000x20000, past Pillow's decompression bomb limit."""
    return make_png_header(20000, 20000)
