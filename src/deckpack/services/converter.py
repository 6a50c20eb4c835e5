"""Working document <-> portable document conversion.

``to_portable`` replaces every inline binary with an ``asset://sha256:``
reference, storing the bytes in an AssetStore. ``to_working`` is the
structural inverse and never touches bytes.
"""

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ..models.asset import (
    AssetMetadata,
    ImageMetadata,
    create_asset_reference,
    is_asset_reference,
)
from ..models.deck import (
    SCHEMA_VERSION,
    CustomElement,
    DeckDocument,
    GroupElement,
    ImageBackground,
    ImageElement,
    MediaElement,
    PortableDocument,
    SchemaStamp,
    VideoBackground,
    WorkingDocument,
)
from ..models.errors import AssetDecodeError, ErrorCode, UnsupportedAssetFormatError
from ..storage.base import AssetStore
from ..utils.logging import get_logger
from .sniffer import (
    OCTET_STREAM,
    ValueKind,
    classify,
    declared_mime_type,
    detect_mime_type,
    extract_bytes,
    is_embedded_asset,
    probe_image_dimensions,
)

logger = get_logger(__name__)

# Top-level fields copied through unchanged in both directions.
_PASSTHROUGH_FIELDS = ("provenance", "theme", "settings")


@dataclass
class ConversionWarning:
    """A field that could not be converted and was left as supplied."""

    path: str
    code: ErrorCode
    message: str


@dataclass
class AssetSlot:
    """A binary-bearing field inside a document tree."""

    path: str
    owner: Any
    key: str
    # Free-form props are only converted when the value itself looks embedded.
    embedded_only: bool = False

    @property
    def value(self) -> Any:
        if isinstance(self.owner, dict):
            return self.owner.get(self.key)
        return getattr(self.owner, self.key)

    def assign(self, value: Any) -> None:
        if isinstance(self.owner, dict):
            self.owner[self.key] = value
        else:
            setattr(self.owner, self.key, value)


def iter_asset_slots(document: DeckDocument) -> Iterator[AssetSlot]:
    """Yield every field of a document that may hold an embedded binary.

    Order: cover image, then per slide the background, thumbnail, elements and
    layers, then the default background, branding logo and master slides.
    """
    yield AssetSlot("meta.coverImage", document.meta, "cover_image")

    for i, slide in enumerate(document.slides):
        path = f"slides[{i}]"
        yield from _background_slots(slide, "background", f"{path}.background")
        yield AssetSlot(f"{path}.thumbnail", slide, "thumbnail")
        yield from _element_slots(slide.elements or [], f"{path}.elements")
        for j, layer in enumerate(slide.layers or []):
            yield from _element_slots(layer.elements, f"{path}.layers[{j}].elements")

    settings = document.settings
    if settings is None:
        return

    yield from _background_slots(settings, "default_background", "settings.defaultBackground")

    if settings.branding and settings.branding.logo:
        yield AssetSlot("settings.branding.logo.src", settings.branding.logo, "src")

    if settings.theme and settings.theme.master_slides:
        for k, master in enumerate(settings.theme.master_slides):
            path = f"settings.theme.masterSlides[{k}]"
            yield from _background_slots(master, "background", f"{path}.background")
            yield from _element_slots(master.elements or [], f"{path}.elements")


def _background_slots(owner: Any, attr: str, path: str) -> Iterator[AssetSlot]:
    background = getattr(owner, attr)
    if isinstance(background, str):
        yield AssetSlot(path, owner, attr)
    elif isinstance(background, (ImageBackground, VideoBackground)):
        yield AssetSlot(f"{path}.value", background, "value")


def _element_slots(elements: list[Any], path: str) -> Iterator[AssetSlot]:
    for i, element in enumerate(elements):
        element_path = f"{path}[{i}]"
        if isinstance(element, (ImageElement, MediaElement)):
            yield AssetSlot(f"{element_path}.src", element, "src")
        elif isinstance(element, GroupElement):
            yield from _element_slots(element.children, f"{element_path}.children")
        elif isinstance(element, CustomElement) and element.props:
            for key in element.props:
                yield AssetSlot(
                    f"{element_path}.props.{key}", element.props, key, embedded_only=True
                )


def collect_asset_references(document: DeckDocument) -> list[str]:
    """List every asset reference used in a document, in walk order, without duplicates."""
    references: dict[str, None] = {}
    for slot in iter_asset_slots(document):
        value = slot.value
        if is_asset_reference(value):
            references[value] = None
    return list(references)


class _AssetResolver:
    """Per-call state for one to_portable run."""

    def __init__(
        self,
        store: AssetStore,
        diagnostics: list[ConversionWarning] | None,
        min_base64_length: int | None,
    ) -> None:
        self.store = store
        self.diagnostics = diagnostics
        self.min_base64_length = min_base64_length
        # One in-flight resolution per raw value, so each value is put at most once.
        self._pending: dict[str, asyncio.Future[str]] = {}
        self.registry: dict[str, str] = {}

    async def resolve_slot(self, slot: AssetSlot) -> None:
        value = slot.value
        if slot.embedded_only and not (
            is_asset_reference(value) or is_embedded_asset(value, self.min_base64_length)
        ):
            return
        resolved = await self.resolve(value, slot.path)
        if resolved != value:
            slot.assign(resolved)

    async def resolve(self, value: Any, path: str) -> Any:
        if not value or not isinstance(value, str):
            return value

        if is_asset_reference(value):
            self.registry[value] = value
            return value

        if classify(value, self.min_base64_length) is not ValueKind.EMBEDDED:
            return value

        pending = self._pending.get(value)
        if pending is None:
            pending = asyncio.ensure_future(self._store_embedded(value, path))
            self._pending[value] = pending
        return await pending

    async def cancel_pending(self) -> None:
        """Cancel unfinished resolutions and collect every outcome."""
        for future in self._pending.values():
            future.cancel()
        await asyncio.gather(*self._pending.values(), return_exceptions=True)

    async def _store_embedded(self, value: str, path: str) -> str:
        try:
            data = extract_bytes(value)
        except (AssetDecodeError, UnsupportedAssetFormatError) as e:
            logger.warning(
                "asset_resolution_failed",
                path=path,
                error_code=e.code.value,
                error=e.message,
            )
            if self.diagnostics is not None:
                self.diagnostics.append(ConversionWarning(path=path, code=e.code, message=e.message))
            return value

        mime_type = detect_mime_type(data)
        if mime_type == OCTET_STREAM:
            mime_type = declared_mime_type(value) or mime_type

        image = None
        if mime_type.startswith("image/"):
            dimensions = probe_image_dimensions(data, mime_type)
            if dimensions:
                image = ImageMetadata(width=dimensions.width, height=dimensions.height)

        sha256 = await self.store.put(data, AssetMetadata(mime_type=mime_type, image=image))
        reference = create_asset_reference(sha256)
        self.registry[reference] = reference
        logger.debug(
            "asset_extracted",
            path=path,
            sha256=sha256,
            mime_type=mime_type,
            byte_size=len(data),
        )
        return reference


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _passthrough_fields(document: DeckDocument) -> dict[str, Any]:
    fields = {
        name: getattr(document, name)
        for name in _PASSTHROUGH_FIELDS
        if name in document.model_fields_set
    }
    fields.update(document.model_extra or {})
    return fields


async def to_portable(
    document: WorkingDocument,
    store: AssetStore,
    *,
    diagnostics: list[ConversionWarning] | None = None,
    min_base64_length: int | None = None,
) -> PortableDocument:
    """
    Convert a working document into its portable form.

    Every embedded binary is stored in ``store`` and replaced by an asset
    reference; external URLs, paths and existing references pass through.
    Fields that fail to decode are left untouched, logged, and appended to
    ``diagnostics`` when a list is given.

    Args:
        document: The working document. It is not modified.
        store: Asset store receiving the extracted bytes.
        diagnostics: Optional sink for per-field conversion warnings.
        min_base64_length: Override for the raw base64 length heuristic.

    Returns:
        The portable document with a registry of every reference it uses.
    """
    working = document.model_copy(deep=True)
    resolver = _AssetResolver(store, diagnostics, min_base64_length)

    # Cover image first, then the rest of the tree concurrently.
    slots = list(iter_asset_slots(working))
    if slots:
        await resolver.resolve_slot(slots[0])
        tasks = [asyncio.ensure_future(resolver.resolve_slot(slot)) for slot in slots[1:]]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await resolver.cancel_pending()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    portable = PortableDocument(
        schema_stamp=SchemaStamp(version=SCHEMA_VERSION, migrated_at=utc_now_iso()),
        meta=working.meta,
        slides=working.slides,
        assets=resolver.registry,
        **_passthrough_fields(working),
    )
    logger.info(
        "document_converted_to_portable",
        deck_id=working.meta.id,
        slides=len(working.slides),
        assets=len(resolver.registry),
    )
    return portable


def to_working(manifest: PortableDocument) -> WorkingDocument:
    """
    Convert a portable document back into a working document.

    References stay as-is; they are resolved to bytes on demand by whoever
    renders the deck. Missing ``elements``/``layers`` become empty lists.
    """
    portable = manifest.model_copy(deep=True)
    for slide in portable.slides:
        if slide.elements is None:
            slide.elements = []
        if slide.layers is None:
            slide.layers = []

    return WorkingDocument(
        meta=portable.meta,
        slides=portable.slides,
        **_passthrough_fields(portable),
    )
