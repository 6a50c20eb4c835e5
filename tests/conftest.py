"""Pytest configuration and fixtures."""

import base64
from typing import Any

import pytest

from deckpack.models import AssetMetadata, WorkingDocument
from deckpack.storage import MemoryAssetStore

# 1x1 red pixel PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
)
PNG_DATA_URI = f"data:image/png;base64,{PNG_BASE64}"
PNG_BYTES = base64.b64decode(PNG_BASE64)

# Minimal GIF header: 3x5 logical screen
GIF_BYTES = b"GIF89a\x03\x00\x05\x00\x80\x00\x00" + b"\x00" * 16
GIF_DATA_URI = "data:image/gif;base64," + base64.b64encode(GIF_BYTES).decode("ascii")

EXISTING_REFERENCE = (
    "asset://sha256:abc123def456789abc123def456789abc123def456789abc123def456789abcd"
)


class CountingAssetStore(MemoryAssetStore):
    """Memory store that records every put call."""

    def __init__(self) -> None:
        super().__init__()
        self.put_calls: list[str] = []

    async def put(self, data: bytes, metadata: AssetMetadata | None = None) -> str:
        sha256 = await super().put(data, metadata)
        self.put_calls.append(sha256)
        return sha256


@pytest.fixture
def store() -> CountingAssetStore:
    """Empty in-memory asset store that counts puts."""
    return CountingAssetStore()


@pytest.fixture
def png_data_uri() -> str:
    """Data URI of a 1x1 PNG."""
    return PNG_DATA_URI


@pytest.fixture
def png_bytes() -> bytes:
    """Raw bytes of a 1x1 PNG."""
    return PNG_BYTES


@pytest.fixture
def gif_data_uri() -> str:
    """Data URI of a 3x5 GIF header."""
    return GIF_DATA_URI


@pytest.fixture
def existing_reference() -> str:
    """A well-formed reference whose bytes are not in any store."""
    return EXISTING_REFERENCE


def make_deck(**overrides: Any) -> WorkingDocument:
    """Build a working document from wire-format (camelCase) fields."""
    data: dict[str, Any] = {
        "meta": {"id": "deck-1", "title": "Test Deck"},
        "slides": [],
    }
    data.update(overrides)
    return WorkingDocument.model_validate(data)


@pytest.fixture
def deck_factory():
    """Factory for working documents."""
    return make_deck


@pytest.fixture
def rich_deck(png_data_uri: str) -> WorkingDocument:
    """A deck exercising every binary-bearing field."""
    return make_deck(
        meta={
            "id": "rich-deck",
            "title": "Rich Deck",
            "coverImage": png_data_uri,
            "tags": ["demo"],
        },
        slides=[
            {
                "id": "slide-1",
                "title": "Intro",
                "background": {"type": "image", "value": png_data_uri},
                "transitions": {"in": {"type": "fade", "duration": 500}},
                "builds": [{"id": "b1", "targetId": "img-1"}],
                "timeline": {"duration": 12},
                "notes": {"speaker": "Welcome everyone"},
                "elements": [
                    {
                        "id": "img-1",
                        "type": "image",
                        "src": png_data_uri,
                        "bounds": {"x": 0, "y": 0, "width": 100, "height": 100},
                    },
                    {
                        "id": "group-1",
                        "type": "group",
                        "children": [
                            {"id": "img-2", "type": "image", "src": png_data_uri},
                            {"id": "text-1", "type": "text", "content": "Grouped"},
                        ],
                    },
                ],
            },
            {
                "id": "slide-2",
                "background": {"type": "color", "value": "#ff0000", "opacity": 0.8},
                "layers": [
                    {
                        "id": "layer-1",
                        "name": "Content",
                        "order": 0,
                        "elements": [
                            {
                                "id": "custom-1",
                                "type": "custom",
                                "componentName": "Avatar",
                                "props": {"name": "Ada", "avatarUrl": png_data_uri},
                            }
                        ],
                    }
                ],
            },
        ],
        settings={
            "branding": {"logo": {"src": png_data_uri, "alt": "Logo", "position": "top-right"}},
            "theme": {
                "masterSlides": [
                    {
                        "id": "master-1",
                        "background": png_data_uri,
                        "elements": [
                            {"id": "master-img", "type": "image", "src": png_data_uri}
                        ],
                    }
                ]
            },
        },
        provenance=[
            {"id": "prov-1", "timestamp": "2025-01-01T00:00:00Z", "actor": "user", "action": "create"}
        ],
    )
