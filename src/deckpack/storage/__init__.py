"""Storage layer."""

from .base import AssetStore, build_asset_info
from .file_store import FileAssetStore
from .memory_store import MemoryAssetStore

__all__ = ["AssetStore", "FileAssetStore", "MemoryAssetStore", "build_asset_info"]
