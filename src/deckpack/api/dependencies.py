"""Shared API dependencies."""

from ..storage import FileAssetStore

# Global instance
_asset_store: FileAssetStore | None = None


def get_asset_store() -> FileAssetStore:
    """Get or create the asset store instance."""
    global _asset_store
    if _asset_store is None:
        _asset_store = FileAssetStore()
    return _asset_store
