"""Asset store contract."""

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from ..models.asset import AssetInfo, AssetMetadata

DEFAULT_MIME_TYPE = "application/octet-stream"


@runtime_checkable
class AssetStore(Protocol):
    """Content-addressed blob storage.

    Assets are keyed by the SHA-256 digest of their bytes. The first put of a
    given hash stores bytes and metadata; later puts of the same bytes return
    the same hash without touching the stored record.
    """

    async def put(self, data: bytes, metadata: AssetMetadata | None = None) -> str:
        """Store bytes and return their SHA-256 hex digest."""
        ...

    async def get(self, sha256: str) -> bytes | None:
        """Return stored bytes, or None if absent."""
        ...

    async def info(self, sha256: str) -> AssetInfo | None:
        """Return stored metadata, or None if absent."""
        ...

    async def exists(self, sha256: str) -> bool:
        """Check whether bytes are stored under the hash."""
        ...

    async def delete(self, sha256: str) -> bool:
        """Remove bytes and metadata; True if anything was removed."""
        ...


def build_asset_info(sha256: str, data: bytes, metadata: AssetMetadata | None) -> AssetInfo:
    """Complete caller metadata into a stored AssetInfo record."""
    now = datetime.now(UTC)
    fields = metadata.model_dump(exclude_none=True) if metadata else {}
    fields.update(
        sha256=sha256,
        byte_size=len(data),
        mime_type=fields.get("mime_type") or DEFAULT_MIME_TYPE,
        created_at=fields.get("created_at") or now,
        last_accessed_at=fields.get("last_accessed_at") or now,
        ref_count=fields.get("ref_count") or 1,
    )
    return AssetInfo.model_validate(fields)
