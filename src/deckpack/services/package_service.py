"""Package export/import service."""

from dataclasses import dataclass, field
from pathlib import PurePosixPath

from ..config import settings
from ..models.asset import AssetMetadata, extract_asset_hash
from ..models.deck import PortableDocument, WorkingDocument
from ..storage.base import AssetStore
from ..utils.hash import is_valid_hash, verify_hash
from ..utils.logging import get_logger
from .converter import ConversionWarning, to_portable, to_working
from .package_codec import PackageCodec
from .sniffer import OCTET_STREAM, detect_mime_type

logger = get_logger(__name__)

MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "font/woff2": ".woff2",
    "font/woff": ".woff",
    "font/ttf": ".ttf",
    "font/otf": ".otf",
}


@dataclass
class ExportResult:
    """Archive bytes and the portable document they were built from."""

    archive: bytes
    document: PortableDocument
    asset_paths: list[str] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass
class ImportResult:
    """A working document restored from an archive."""

    document: WorkingDocument
    manifest: PortableDocument
    imported: list[str] = field(default_factory=list)
    files: dict[str, bytes] = field(default_factory=dict)


class PackageService:
    """Export working documents to `.lume` archives and import them back."""

    def __init__(
        self,
        store: AssetStore,
        codec: PackageCodec | None = None,
        asset_prefix: str | None = None,
    ) -> None:
        """Initialize package service."""
        self.store = store
        self.codec = codec or PackageCodec()
        self.asset_prefix = settings.asset_archive_prefix if asset_prefix is None else asset_prefix

    def asset_path(self, sha256: str, mime_type: str) -> str:
        """Get the archive path for an asset."""
        extension = MIME_EXTENSIONS.get(mime_type, ".bin")
        return f"{self.asset_prefix}{sha256}{extension}"

    async def export_document(
        self,
        document: WorkingDocument,
        *,
        include_assets: bool = True,
    ) -> ExportResult:
        """
        Convert a working document and serialize it into an archive.

        Args:
            document: The working document to export.
            include_assets: Copy referenced asset bytes into the archive.

        Returns:
            The archive together with the portable document and any
            per-field conversion warnings.
        """
        warnings: list[ConversionWarning] = []
        portable = await to_portable(document, self.store, diagnostics=warnings)

        asset_files = await self.collect_asset_files(portable) if include_assets else {}
        archive = await self.codec.serialize(portable, asset_files)

        logger.info(
            "document_exported",
            deck_id=portable.meta.id,
            assets=len(portable.assets),
            asset_files=len(asset_files),
            warnings=len(warnings),
            archive_bytes=len(archive),
        )
        return ExportResult(
            archive=archive,
            document=portable,
            asset_paths=list(asset_files),
            warnings=warnings,
        )

    async def collect_asset_files(self, document: PortableDocument) -> dict[str, bytes]:
        """Fetch the bytes of every referenced asset the store holds."""
        files: dict[str, bytes] = {}
        for reference in document.assets:
            sha256 = extract_asset_hash(reference)
            data = await self.store.get(sha256)
            if data is None:
                logger.warning("asset_missing_from_store", sha256=sha256)
                continue
            info = await self.store.info(sha256)
            mime_type = info.mime_type if info else detect_mime_type(data)
            files[self.asset_path(sha256, mime_type)] = data
        return files

    async def import_package(self, data: bytes) -> ImportResult:
        """
        Deserialize an archive, load its assets into the store and
        return the working document.

        Asset files named after their hash are stored when the content
        matches the name; anything else stays in ``files`` untouched.

        Raises:
            InvalidPackageError: If the archive lacks its required manifests.
        """
        contents = await self.codec.deserialize(data)

        imported: list[str] = []
        for path, content in contents.files.items():
            if not path.startswith(self.asset_prefix):
                continue
            name = PurePosixPath(path).name
            sha256 = name.split(".", 1)[0]
            if not is_valid_hash(sha256):
                continue
            if not verify_hash(content, sha256):
                logger.warning("asset_hash_mismatch", path=path, expected=sha256)
                continue

            mime_type = detect_mime_type(content)
            if mime_type == OCTET_STREAM:
                mime_type = _mime_from_extension(name) or mime_type
            await self.store.put(
                content,
                AssetMetadata(mime_type=mime_type, original_filename=name),
            )
            imported.append(sha256)

        logger.info(
            "package_imported",
            deck_id=contents.document.meta.id,
            imported_assets=len(imported),
        )
        return ImportResult(
            document=to_working(contents.document),
            manifest=contents.document,
            imported=imported,
            files=contents.files,
        )


def _mime_from_extension(filename: str) -> str | None:
    suffix = PurePosixPath(filename).suffix.lower()
    for mime_type, extension in MIME_EXTENSIONS.items():
        if extension == suffix:
            return mime_type
    return None
