"""Domain models."""

from .asset import (
    ASSET_REFERENCE_PREFIX,
    AssetInfo,
    AssetMetadata,
    AudioMetadata,
    FontMetadata,
    ImageDimensions,
    ImageMetadata,
    VideoMetadata,
    create_asset_reference,
    extract_asset_hash,
    is_asset_reference,
)
from .deck import (
    SCHEMA_VERSION,
    Background,
    DeckMeta,
    DeckSettings,
    Element,
    GroupElement,
    Layer,
    MasterSlide,
    PortableDocument,
    ProvenanceEntry,
    SchemaStamp,
    Slide,
    WorkingDocument,
)
from .errors import (
    AssetDecodeError,
    AssetStoreError,
    DeckPackError,
    ErrorCode,
    ErrorResponse,
    InvalidAssetHashError,
    InvalidPackageError,
    UnsupportedAssetFormatError,
)

__all__ = [
    "ASSET_REFERENCE_PREFIX",
    "AssetInfo",
    "AssetMetadata",
    "AudioMetadata",
    "FontMetadata",
    "ImageDimensions",
    "ImageMetadata",
    "VideoMetadata",
    "create_asset_reference",
    "extract_asset_hash",
    "is_asset_reference",
    "SCHEMA_VERSION",
    "Background",
    "DeckMeta",
    "DeckSettings",
    "Element",
    "GroupElement",
    "Layer",
    "MasterSlide",
    "PortableDocument",
    "ProvenanceEntry",
    "SchemaStamp",
    "Slide",
    "WorkingDocument",
    "AssetDecodeError",
    "AssetStoreError",
    "DeckPackError",
    "ErrorCode",
    "ErrorResponse",
    "InvalidAssetHashError",
    "InvalidPackageError",
    "UnsupportedAssetFormatError",
]
