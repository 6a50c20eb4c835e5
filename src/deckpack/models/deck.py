"""Deck document models.

Both the working document and its portable form share one shape. Keys are
camelCase on the wire, unknown keys are kept as extras, and dumps only
include keys that were actually set so that documents round-trip without
growing new fields.
"""

from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "v1.0"


class DeckModel(BaseModel):
    """Base model for every document node."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# Backgrounds


class ColorBackground(DeckModel):
    type: Literal["color"]
    value: str
    opacity: float | None = None


class GradientBackground(DeckModel):
    type: Literal["gradient"]
    value: str | dict[str, Any]
    opacity: float | None = None


class ImageBackground(DeckModel):
    type: Literal["image"]
    value: str
    opacity: float | None = None


class VideoBackground(DeckModel):
    type: Literal["video"]
    value: str
    opacity: float | None = None


BackgroundObject = Annotated[
    Union[ColorBackground, GradientBackground, ImageBackground, VideoBackground],
    Field(discriminator="type"),
]

# A bare string background is a color, URL or inline image.
Background = Union[str, BackgroundObject]


# Elements


class BaseElement(DeckModel):
    id: str
    name: str | None = None
    bounds: dict[str, Any] | None = None
    style: dict[str, Any] | None = None
    animation: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None


class TextElement(BaseElement):
    type: Literal["text"]
    content: str


class RichTextElement(BaseElement):
    type: Literal["richtext"]
    content: str
    format: Literal["html", "markdown"] | None = None


class CodeBlockElement(BaseElement):
    type: Literal["codeblock"]
    code: str
    language: str | None = None


class TableElement(BaseElement):
    type: Literal["table"]
    headers: list[str] | None = None
    rows: list[list[Any]] = Field(default_factory=list)


class ImageElement(BaseElement):
    type: Literal["image"]
    src: str
    alt: str | None = None


class MediaElement(BaseElement):
    type: Literal["media"]
    src: str
    media_type: Literal["image", "video", "audio"]


class ShapeElement(BaseElement):
    type: Literal["shape"]
    shape_type: str


class ChartElement(BaseElement):
    type: Literal["chart"]
    chart_type: str
    data: list[dict[str, Any]] = Field(default_factory=list)


class GroupElement(BaseElement):
    type: Literal["group"]
    children: list["Element"] = Field(default_factory=list)


class CustomElement(BaseElement):
    type: Literal["custom"]
    component_name: str
    props: dict[str, Any] | None = None


Element = Annotated[
    Union[
        TextElement,
        RichTextElement,
        CodeBlockElement,
        TableElement,
        ImageElement,
        MediaElement,
        ShapeElement,
        ChartElement,
        GroupElement,
        CustomElement,
    ],
    Field(discriminator="type"),
]

GroupElement.model_rebuild()


def iter_elements(elements: list[Any]) -> Iterator[Any]:
    """Yield elements depth-first, descending into group children."""
    for element in elements:
        yield element
        if isinstance(element, GroupElement):
            yield from iter_elements(element.children)


# Slides


class Layer(DeckModel):
    id: str
    name: str | None = None
    order: int = 0
    elements: list[Element] = Field(default_factory=list)


class Slide(DeckModel):
    id: str
    title: str | None = None
    layout: str | None = None
    background: Background | None = None
    thumbnail: str | None = None
    elements: list[Element] | None = None
    layers: list[Layer] | None = None
    transitions: dict[str, Any] | None = None
    builds: list[dict[str, Any]] | None = None
    timeline: dict[str, Any] | None = None
    notes: str | dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_unique_element_ids(self) -> "Slide":
        """Element ids must be unique within a slide."""
        seen: set[str] = set()
        for element in self.all_elements():
            if element.id in seen:
                raise ValueError(f"Duplicate element id '{element.id}' on slide '{self.id}'")
            seen.add(element.id)
        return self

    def all_elements(self) -> Iterator[Any]:
        """Iterate every element on the slide, including layers and group children."""
        yield from iter_elements(self.elements or [])
        for layer in self.layers or []:
            yield from iter_elements(layer.elements)


# Metadata and settings


class Author(DeckModel):
    name: str
    email: str | None = None
    role: str | None = None


class DeckMeta(DeckModel):
    id: str
    title: str
    description: str | None = None
    authors: list[Author] | None = None
    tags: list[str] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    cover_image: str | None = None


class BrandingLogo(DeckModel):
    src: str | None = None
    alt: str | None = None
    position: str | None = None


class Branding(DeckModel):
    logo: BrandingLogo | None = None


class MasterSlide(DeckModel):
    id: str
    name: str | None = None
    background: Background | None = None
    elements: list[Element] | None = None


class ThemeSettings(DeckModel):
    master_slides: list[MasterSlide] | None = None


class NavigationSettings(DeckModel):
    mode: Literal["linear", "freeform", "zoom"] | None = None


class DeckSettings(DeckModel):
    navigation: NavigationSettings | None = None
    default_background: Background | None = None
    branding: Branding | None = None
    theme: ThemeSettings | None = None


class ProvenanceEntry(DeckModel):
    id: str
    timestamp: str
    actor: str
    action: str
    details: dict[str, Any] | None = None


class AssetDeclaration(DeckModel):
    """An asset declared by the editor (working documents only)."""

    id: str
    filename: str | None = None
    type: str | None = None
    path: str | None = None
    metadata: dict[str, Any] | None = None


class SchemaStamp(DeckModel):
    version: str = SCHEMA_VERSION
    migrated_at: str | None = None


# Documents


class DeckDocument(DeckModel):
    meta: DeckMeta
    slides: list[Slide] = Field(default_factory=list)
    provenance: list[ProvenanceEntry] | None = None
    theme: dict[str, Any] | None = None
    settings: DeckSettings | None = None


class WorkingDocument(DeckDocument):
    """The live, editable deck; binary-bearing fields may hold inline data."""

    assets: list[AssetDeclaration] | None = None


class PortableDocument(DeckDocument):
    """The archivable deck; binary-bearing fields hold asset references."""

    schema_stamp: SchemaStamp = Field(alias="schema")
    assets: dict[str, str] = Field(default_factory=dict)
