"""In-memory asset store."""

from ..models.asset import AssetInfo, AssetMetadata
from ..utils.hash import hash_bytes
from .base import build_asset_info


class MemoryAssetStore:
    """Dict-backed asset store, used for tests and one-shot conversions."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._blobs: dict[str, bytes] = {}
        self._info: dict[str, AssetInfo] = {}

    async def put(self, data: bytes, metadata: AssetMetadata | None = None) -> str:
        """Store bytes by hash; existing hashes are left untouched."""
        sha256 = hash_bytes(data)
        # No await between the check and the insert, so racing puts cannot both write.
        if sha256 not in self._blobs:
            self._blobs[sha256] = bytes(data)
            self._info[sha256] = build_asset_info(sha256, data, metadata)
        return sha256

    async def get(self, sha256: str) -> bytes | None:
        """Get bytes by hash."""
        return self._blobs.get(sha256)

    async def info(self, sha256: str) -> AssetInfo | None:
        """Get metadata by hash."""
        return self._info.get(sha256)

    async def exists(self, sha256: str) -> bool:
        """Check if bytes exist for a hash."""
        return sha256 in self._blobs

    async def delete(self, sha256: str) -> bool:
        """Delete bytes and metadata for a hash."""
        existed = sha256 in self._blobs
        self._blobs.pop(sha256, None)
        self._info.pop(sha256, None)
        return existed

    def __len__(self) -> int:
        return len(self._blobs)

    def hashes(self) -> list[str]:
        """List stored hashes in insertion order."""
        return list(self._blobs)

    def clear(self) -> None:
        """Remove everything."""
        self._blobs.clear()
        self._info.clear()
