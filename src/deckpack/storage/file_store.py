"""File system asset store with YAML metadata sidecars."""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from ..config import settings
from ..models.asset import AssetInfo, AssetMetadata
from ..models.errors import AssetStoreError, InvalidAssetHashError
from ..utils.hash import hash_bytes, is_valid_hash
from ..utils.logging import get_logger
from .base import build_asset_info

logger = get_logger(__name__)


class FileAssetStore:
    """Content-addressed asset storage on the local file system.

    Layout::

        <root>/<hash[:2]>/<hash>       binary data
        <root>/<hash[:2]>/<hash>.yml   AssetInfo metadata

    Blobs are written to a temp file and published with an exclusive hard
    link, so concurrent writers of the same hash produce exactly one winner.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        """Initialize file store rooted at the given directory."""
        self.root = Path(root) if root is not None else settings.assets_path

    def ensure_directories(self) -> None:
        """Ensure the store root exists."""
        self.root.mkdir(parents=True, exist_ok=True)

    def get_shard_dir(self, sha256: str) -> Path:
        """Get the shard directory for a hash."""
        if not is_valid_hash(sha256):
            raise InvalidAssetHashError(sha256)
        return self.root / sha256[:2]

    def get_blob_path(self, sha256: str) -> Path:
        """Get the blob path for a hash."""
        return self.get_shard_dir(sha256) / sha256

    def get_info_path(self, sha256: str) -> Path:
        """Get the metadata sidecar path for a hash."""
        return self.get_shard_dir(sha256) / f"{sha256}.yml"

    async def put(self, data: bytes, metadata: AssetMetadata | None = None) -> str:
        """Store bytes by hash; the first writer of a hash wins."""
        sha256 = hash_bytes(data)
        info = build_asset_info(sha256, data, metadata)
        try:
            written = await asyncio.to_thread(self._write_once, sha256, data, info)
        except OSError as e:
            raise AssetStoreError("put", str(e)) from e

        if written:
            logger.debug("asset_stored", sha256=sha256, byte_size=len(data))
        else:
            logger.debug("asset_deduplicated", sha256=sha256)
        return sha256

    async def get(self, sha256: str) -> bytes | None:
        """Get bytes by hash."""
        path = self.get_blob_path(sha256)
        try:
            return await asyncio.to_thread(self._read_bytes, path)
        except OSError as e:
            raise AssetStoreError("get", str(e)) from e

    async def info(self, sha256: str) -> AssetInfo | None:
        """Get metadata by hash."""
        path = self.get_info_path(sha256)
        try:
            data = await asyncio.to_thread(self._load_yaml, path)
        except OSError as e:
            raise AssetStoreError("info", str(e)) from e
        if not data:
            return None
        return AssetInfo.model_validate(data)

    async def exists(self, sha256: str) -> bool:
        """Check if bytes exist for a hash."""
        return await asyncio.to_thread(self.get_blob_path(sha256).exists)

    async def delete(self, sha256: str) -> bool:
        """Delete bytes and metadata for a hash."""
        paths = [self.get_blob_path(sha256), self.get_info_path(sha256)]
        try:
            removed = await asyncio.to_thread(self._unlink_all, paths)
        except OSError as e:
            raise AssetStoreError("delete", str(e)) from e
        if removed:
            logger.info("asset_deleted", sha256=sha256)
        return removed

    def list_hashes(self) -> list[str]:
        """List all stored hashes."""
        if not self.root.exists():
            return []
        return sorted(
            path.name
            for path in self.root.glob("*/*")
            if path.is_file() and is_valid_hash(path.name)
        )

    def _write_once(self, sha256: str, data: bytes, info: AssetInfo) -> bool:
        """Publish blob and metadata unless the hash is already stored.

        A blob left without its sidecar by an earlier failed write gets the
        sidecar of the next put of the same bytes.
        """
        blob_path = self.get_blob_path(sha256)
        shard_dir = blob_path.parent
        if blob_path.exists():
            if not self.get_info_path(sha256).exists():
                self._publish_info(shard_dir, sha256, info, replace=False)
                logger.warning("asset_info_restored", sha256=sha256)
            return False

        shard_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self._write_temp(shard_dir, sha256, data)
        try:
            os.link(tmp_path, blob_path)
        except FileExistsError:
            return False
        finally:
            tmp_path.unlink(missing_ok=True)

        self._publish_info(shard_dir, sha256, info, replace=True)
        return True

    def _publish_info(
        self, shard_dir: Path, sha256: str, info: AssetInfo, replace: bool
    ) -> None:
        """Write the metadata sidecar; without ``replace`` an existing one is kept."""
        payload = yaml.safe_dump(
            info.model_dump(mode="json", by_alias=True, exclude_none=True),
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
        info_path = self.get_info_path(sha256)
        info_tmp = self._write_temp(shard_dir, sha256, payload.encode("utf-8"))
        try:
            if replace:
                os.replace(info_tmp, info_path)
            else:
                os.link(info_tmp, info_path)
        except FileExistsError:
            pass
        finally:
            info_tmp.unlink(missing_ok=True)

    @staticmethod
    def _write_temp(directory: Path, sha256: str, data: bytes) -> Path:
        fd, name = tempfile.mkstemp(dir=directory, prefix=f".{sha256}.", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return Path(name)

    @staticmethod
    def _read_bytes(path: Path) -> bytes | None:
        if not path.exists():
            return None
        return path.read_bytes()

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _unlink_all(paths: list[Path]) -> bool:
        removed = False
        for path in paths:
            if path.exists():
                path.unlink(missing_ok=True)
                removed = True
        return removed
