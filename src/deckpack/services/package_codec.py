"""`.lume` archive serialization.

Archive layout::

    meta.json         deck metadata (required)
    slides.json       ordered slides, notes stripped (required)
    notes.json        slide id -> notes
    provenance.json   provenance entries
    animations.json   slide id -> transitions/builds, derived from slides.json
    document.json     schema stamp, asset registry, theme and settings
    assets/...        raw asset bytes at caller-chosen paths
"""

import asyncio
import io
import json
import zipfile
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..config import settings
from ..models.deck import SCHEMA_VERSION, PortableDocument, Slide
from ..models.errors import InvalidPackageError
from ..utils.logging import get_logger
from .converter import collect_asset_references, utc_now_iso

logger = get_logger(__name__)

META_FILENAME = "meta.json"
SLIDES_FILENAME = "slides.json"
NOTES_FILENAME = "notes.json"
PROVENANCE_FILENAME = "provenance.json"
ANIMATIONS_FILENAME = "animations.json"
DOCUMENT_FILENAME = "document.json"

REQUIRED_MANIFESTS = (META_FILENAME, SLIDES_FILENAME)
RESERVED_FILENAMES = frozenset(
    {
        META_FILENAME,
        SLIDES_FILENAME,
        NOTES_FILENAME,
        PROVENANCE_FILENAME,
        ANIMATIONS_FILENAME,
        DOCUMENT_FILENAME,
    }
)

# Missing or null slide collections are written as empty values.
_SLIDE_DEFAULTS = (
    ("elements", list),
    ("builds", list),
    ("transitions", dict),
    ("timeline", dict),
)


@dataclass
class PackageContents:
    """A deserialized archive: the portable document plus every raw entry."""

    document: PortableDocument
    files: dict[str, bytes] = field(default_factory=dict)


def normalize_slide(slide: Slide) -> dict[str, Any]:
    """Dump a slide with elements, builds, transitions and timeline always present."""
    data = slide.to_json_dict()
    for key, default in _SLIDE_DEFAULTS:
        if data.get(key) is None:
            data[key] = default()
    return data


def extract_animations(slides: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Build the derived animation index from normalized slides."""
    return [
        {
            "slideId": slide["id"],
            "transitions": slide.get("transitions"),
            "builds": slide.get("builds"),
        }
        for slide in slides
    ]


class PackageCodec:
    """Serialize portable documents to `.lume` zip archives and back."""

    def __init__(self, pretty: bool | None = None) -> None:
        """Initialize codec; pretty-prints JSON unless disabled."""
        self.pretty = settings.pretty_json if pretty is None else pretty

    async def serialize(
        self,
        document: PortableDocument,
        asset_files: dict[str, bytes] | None = None,
    ) -> bytes:
        """
        Serialize a portable document and raw asset files into an archive.

        Args:
            document: The portable document.
            asset_files: Archive path -> bytes, e.g. ``assets/<sha256>.png``.

        Returns:
            The zip archive bytes.
        """
        return await asyncio.to_thread(self._write_archive, document, asset_files or {})

    async def deserialize(self, data: bytes) -> PackageContents:
        """
        Deserialize an archive into its portable document and raw files.

        Raises:
            InvalidPackageError: If the archive is unreadable or lacks
                ``meta.json`` or ``slides.json``.
        """
        return await asyncio.to_thread(self._read_archive, data)

    def _dumps(self, value: Any) -> str:
        if self.pretty:
            return json.dumps(value, indent=2, ensure_ascii=False)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def _write_archive(self, document: PortableDocument, asset_files: dict[str, bytes]) -> bytes:
        conflicts = sorted(RESERVED_FILENAMES.intersection(asset_files))
        if conflicts:
            raise ValueError(f"Asset paths collide with manifest names: {', '.join(conflicts)}")

        slides = [normalize_slide(slide) for slide in document.slides]
        notes: dict[str, Any] = {}
        for slide in slides:
            slide_notes = slide.pop("notes", None)
            if slide_notes is not None:
                notes[slide["id"]] = slide_notes

        provenance = [entry.to_json_dict() for entry in document.provenance or []]

        document_manifest: dict[str, Any] = {
            "schema": document.schema_stamp.to_json_dict(),
            "assets": dict(document.assets),
        }
        if "theme" in document.model_fields_set:
            document_manifest["theme"] = document.theme
        if "settings" in document.model_fields_set and document.settings is not None:
            document_manifest["settings"] = document.settings.to_json_dict()
        document_manifest.update(document.model_extra or {})

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(META_FILENAME, self._dumps(document.meta.to_json_dict()))
            archive.writestr(SLIDES_FILENAME, self._dumps(slides))
            archive.writestr(NOTES_FILENAME, self._dumps(notes))
            archive.writestr(PROVENANCE_FILENAME, self._dumps(provenance))
            archive.writestr(ANIMATIONS_FILENAME, self._dumps(extract_animations(slides)))
            archive.writestr(DOCUMENT_FILENAME, self._dumps(document_manifest))
            for path, content in asset_files.items():
                archive.writestr(path, content)

        logger.info(
            "package_serialized",
            deck_id=document.meta.id,
            slides=len(slides),
            asset_files=len(asset_files),
        )
        return buffer.getvalue()

    def _read_archive(self, data: bytes) -> PackageContents:
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise InvalidPackageError("not a zip archive") from e

        with archive:
            names = set(archive.namelist())
            missing = [name for name in REQUIRED_MANIFESTS if name not in names]
            if missing:
                raise InvalidPackageError(
                    "missing required meta.json or slides.json manifest", missing
                )

            meta = self._read_json(archive, META_FILENAME, dict)
            slides = self._read_json(archive, SLIDES_FILENAME, list)
            notes = self._read_json(archive, NOTES_FILENAME, dict) or {}
            provenance = self._read_json(archive, PROVENANCE_FILENAME, list) or []
            document_manifest = self._read_json(archive, DOCUMENT_FILENAME, dict) or {}

            files = {
                info.filename: archive.read(info)
                for info in archive.infolist()
                if not info.is_dir()
            }

        for slide in slides:
            if isinstance(slide, dict) and slide.get("notes") is None:
                slide_notes = notes.get(slide.get("id"))
                if slide_notes is not None:
                    slide["notes"] = slide_notes

        has_registry = "assets" in document_manifest
        payload: dict[str, Any] = {
            **document_manifest,
            "schema": document_manifest.get("schema")
            or {"version": SCHEMA_VERSION, "migratedAt": utc_now_iso()},
            "meta": meta,
            "slides": slides,
            "provenance": provenance,
        }

        try:
            document = PortableDocument.model_validate(payload)
        except ValidationError as e:
            raise InvalidPackageError(f"malformed manifest ({e.error_count()} errors)") from e

        if not has_registry:
            document.assets = {ref: ref for ref in collect_asset_references(document)}

        logger.info(
            "package_deserialized",
            deck_id=document.meta.id,
            slides=len(document.slides),
            files=len(files),
        )
        return PackageContents(document=document, files=files)

    @staticmethod
    def _read_json(archive: zipfile.ZipFile, name: str, expected: type) -> Any:
        try:
            raw = archive.read(name)
        except KeyError:
            return None
        try:
            value = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidPackageError(f"{name} is not valid JSON") from e
        if not isinstance(value, expected):
            raise InvalidPackageError(f"{name} has an unexpected structure")
        return value
