"""Content-addressed asset models."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ASSET_REFERENCE_PREFIX = "asset://sha256:"

_REFERENCE_PATTERN = re.compile(r"^asset://sha256:[a-f0-9]{64}$")


def create_asset_reference(sha256: str) -> str:
    """Create an asset reference URI from a SHA-256 hex digest."""
    return f"{ASSET_REFERENCE_PREFIX}{sha256}"


def is_asset_reference(value: Any) -> bool:
    """Check whether a value is a well-formed asset reference URI."""
    return isinstance(value, str) and bool(_REFERENCE_PATTERN.match(value))


def extract_asset_hash(reference: str) -> str:
    """Extract the SHA-256 hex digest from an asset reference URI."""
    return reference.removeprefix(ASSET_REFERENCE_PREFIX)


@dataclass(frozen=True)
class ImageDimensions:
    """Pixel dimensions probed from a raster image header."""

    width: int
    height: int


class AssetModel(BaseModel):
    """Base model for asset metadata (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageMetadata(AssetModel):
    width: int
    height: int
    color_profile: str | None = None
    bit_depth: int | None = None
    has_alpha: bool | None = None
    dominant_colors: list[str] | None = None
    orientation: int | None = None


class VideoMetadata(AssetModel):
    width: int
    height: int
    duration: float
    frame_rate: float | None = None
    codec: str | None = None
    audio_codec: str | None = None
    bitrate: int | None = None
    has_alpha: bool | None = None


class AudioMetadata(AssetModel):
    duration: float
    codec: str | None = None
    sample_rate: int | None = None
    channels: int | None = None
    bitrate: int | None = None


class FontMetadata(AssetModel):
    family: str
    weight: int | str | None = None
    style: str | None = None
    format: str | None = None
    glyph_count: int | None = None


class AssetMetadata(AssetModel):
    """Caller-supplied metadata for a put; hash and size are filled in by the store."""

    mime_type: str | None = None
    original_filename: str | None = None
    image: ImageMetadata | None = None
    video: VideoMetadata | None = None
    audio: AudioMetadata | None = None
    font: FontMetadata | None = None
    created_at: datetime | None = None
    last_accessed_at: datetime | None = None
    ref_count: int | None = None
    metadata: dict[str, Any] | None = None


class AssetInfo(AssetMetadata):
    """Stored metadata for a content-addressed asset, keyed by its hash."""

    sha256: str
    mime_type: str
    byte_size: int
