"""Unit tests for the .lume archive codec."""

import io
import json
import zipfile

import pytest

from deckpack.models import ErrorCode, InvalidPackageError, PortableDocument
from deckpack.services import PackageCodec, to_portable
from deckpack.services.package_codec import (
    ANIMATIONS_FILENAME,
    DOCUMENT_FILENAME,
    META_FILENAME,
    NOTES_FILENAME,
    PROVENANCE_FILENAME,
    SLIDES_FILENAME,
)


def _zip(entries: dict[str, bytes | str]) -> bytes:
    """Build an archive from raw entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def _read(archive_bytes: bytes, name: str):
    with zipfile.ZipFile(io.BytesIO(archive_bytes)) as archive:
        return json.loads(archive.read(name))


@pytest.fixture
def codec() -> PackageCodec:
    """Codec with compact JSON output."""
    return PackageCodec(pretty=False)


@pytest.fixture
async def portable(store, rich_deck) -> PortableDocument:
    """The rich deck in portable form."""
    return await to_portable(rich_deck, store)


class TestSerialize:
    """Test writing archives."""

    async def test_fixed_manifests(self, codec, portable):
        """Test every manifest is written, compressed."""
        data = await codec.serialize(portable)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = set(archive.namelist())
            compression = {info.compress_type for info in archive.infolist()}

        assert names == {
            META_FILENAME,
            SLIDES_FILENAME,
            NOTES_FILENAME,
            PROVENANCE_FILENAME,
            ANIMATIONS_FILENAME,
            DOCUMENT_FILENAME,
        }
        assert compression == {zipfile.ZIP_DEFLATED}

    async def test_notes_split_out(self, codec, portable):
        """Test notes live in notes.json keyed by slide id, not in slides.json."""
        data = await codec.serialize(portable)

        slides = _read(data, SLIDES_FILENAME)
        notes = _read(data, NOTES_FILENAME)

        assert all("notes" not in slide for slide in slides)
        assert notes == {"slide-1": {"speaker": "Welcome everyone"}}

    async def test_slides_normalized(self, codec, portable):
        """Test missing slide collections are written as empty values."""
        data = await codec.serialize(portable)

        slide_2 = _read(data, SLIDES_FILENAME)[1]
        assert slide_2["elements"] == []
        assert slide_2["builds"] == []
        assert slide_2["transitions"] == {}
        assert slide_2["timeline"] == {}

    async def test_null_slide_collections_normalized(self, codec):
        """Test explicit nulls are written as empty values, not null."""
        document = PortableDocument.model_validate(
            {
                "schema": {"version": "v1.0"},
                "meta": {"id": "deck-1", "title": "Test Deck"},
                "slides": [
                    {
                        "id": "slide-1",
                        "elements": None,
                        "builds": None,
                        "transitions": None,
                        "timeline": None,
                    }
                ],
            }
        )

        data = await codec.serialize(document)

        slide = _read(data, SLIDES_FILENAME)[0]
        assert slide["elements"] == []
        assert slide["builds"] == []
        assert slide["transitions"] == {}
        assert slide["timeline"] == {}
        assert _read(data, ANIMATIONS_FILENAME) == [
            {"slideId": "slide-1", "transitions": {}, "builds": []}
        ]

    async def test_animations_index(self, codec, portable):
        """Test the animation index mirrors slide transitions and builds."""
        data = await codec.serialize(portable)

        assert _read(data, ANIMATIONS_FILENAME) == [
            {
                "slideId": "slide-1",
                "transitions": {"in": {"type": "fade", "duration": 500}},
                "builds": [{"id": "b1", "targetId": "img-1"}],
            },
            {"slideId": "slide-2", "transitions": {}, "builds": []},
        ]

    async def test_meta_provenance_and_document(self, codec, portable):
        """Test meta, provenance and the document manifest contents."""
        data = await codec.serialize(portable)

        assert _read(data, META_FILENAME)["id"] == "rich-deck"
        assert _read(data, PROVENANCE_FILENAME)[0]["id"] == "prov-1"

        document = _read(data, DOCUMENT_FILENAME)
        assert document["schema"]["version"] == "v1.0"
        assert document["assets"] == portable.assets
        assert "branding" in document["settings"]

    async def test_asset_files_written(self, codec, portable, png_bytes):
        """Test asset bytes are stored at the given paths."""
        data = await codec.serialize(portable, {"assets/pixel.png": png_bytes})

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.read("assets/pixel.png") == png_bytes

    async def test_asset_path_collision(self, codec, portable):
        """Test asset paths may not overwrite manifests."""
        with pytest.raises(ValueError, match="meta.json"):
            await codec.serialize(portable, {META_FILENAME: b"{}"})

    async def test_pretty_output(self, portable):
        """Test pretty-printed JSON is indented."""
        data = await PackageCodec(pretty=True).serialize(portable)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            meta_text = archive.read(META_FILENAME).decode("utf-8")
        assert meta_text.startswith("{\n  ")


class TestDeserialize:
    """Test reading archives."""

    async def test_roundtrip(self, codec, portable, png_bytes):
        """Test a written archive reads back to the same document."""
        data = await codec.serialize(portable, {"assets/pixel.png": png_bytes})

        contents = await codec.deserialize(data)

        document = contents.document
        assert document.meta == portable.meta
        assert document.assets == portable.assets
        assert document.schema_stamp == portable.schema_stamp
        assert document.settings == portable.settings
        assert document.provenance == portable.provenance
        assert document.slides[0].notes == {"speaker": "Welcome everyone"}
        assert document.slides[1].notes is None
        assert (
            document.slides[0].elements[1].children[0].src
            == portable.slides[0].elements[1].children[0].src
        )
        assert contents.files["assets/pixel.png"] == png_bytes
        assert META_FILENAME in contents.files

    async def test_only_required_manifests(self, codec):
        """Test notes, provenance and document manifests are optional."""
        data = _zip(
            {
                META_FILENAME: json.dumps({"id": "deck-1", "title": "Minimal"}),
                SLIDES_FILENAME: json.dumps([{"id": "slide-1"}]),
            }
        )

        contents = await codec.deserialize(data)

        document = contents.document
        assert document.meta.title == "Minimal"
        assert document.provenance == []
        assert document.slides[0].notes is None
        assert document.schema_stamp.version == "v1.0"
        assert document.schema_stamp.migrated_at.endswith("Z")
        assert document.assets == {}

    async def test_notes_reattached(self, codec):
        """Test notes are merged back into slides by id."""
        data = _zip(
            {
                META_FILENAME: json.dumps({"id": "deck-1", "title": "Notes"}),
                SLIDES_FILENAME: json.dumps([{"id": "s1"}, {"id": "s2"}]),
                NOTES_FILENAME: json.dumps({"s2": "Remember the demo", "ghost": "orphan"}),
            }
        )

        contents = await codec.deserialize(data)

        assert contents.document.slides[0].notes is None
        assert contents.document.slides[1].notes == "Remember the demo"

    async def test_registry_rebuilt_without_document_manifest(self, codec, existing_reference):
        """Test the asset registry is rebuilt from the tree when absent."""
        data = _zip(
            {
                META_FILENAME: json.dumps(
                    {"id": "deck-1", "title": "Refs", "coverImage": existing_reference}
                ),
                SLIDES_FILENAME: json.dumps(
                    [
                        {
                            "id": "s1",
                            "elements": [
                                {"id": "i1", "type": "image", "src": existing_reference},
                                {"id": "i2", "type": "image", "src": "https://example.com/a.png"},
                            ],
                        }
                    ]
                ),
            }
        )

        contents = await codec.deserialize(data)

        assert contents.document.assets == {existing_reference: existing_reference}

    @pytest.mark.parametrize("missing", [META_FILENAME, SLIDES_FILENAME])
    async def test_missing_required_manifest(self, codec, missing):
        """Test archives without meta.json or slides.json are rejected."""
        entries = {
            META_FILENAME: json.dumps({"id": "deck-1", "title": "Broken"}),
            SLIDES_FILENAME: json.dumps([]),
        }
        del entries[missing]

        with pytest.raises(InvalidPackageError) as exc_info:
            await codec.deserialize(_zip(entries))

        assert exc_info.value.code == ErrorCode.INVALID_PACKAGE
        assert exc_info.value.details == {"missing": [missing]}

    async def test_not_a_zip(self, codec):
        """Test arbitrary bytes are rejected."""
        with pytest.raises(InvalidPackageError, match="not a zip archive"):
            await codec.deserialize(b"definitely not a zip file")

    async def test_invalid_json(self, codec):
        """Test unparseable manifests are rejected."""
        data = _zip({META_FILENAME: "{not json", SLIDES_FILENAME: "[]"})

        with pytest.raises(InvalidPackageError, match="meta.json"):
            await codec.deserialize(data)

    async def test_wrong_structure(self, codec):
        """Test manifests of the wrong JSON type are rejected."""
        data = _zip({META_FILENAME: "[]", SLIDES_FILENAME: "[]"})

        with pytest.raises(InvalidPackageError, match="unexpected structure"):
            await codec.deserialize(data)

    async def test_invalid_document(self, codec):
        """Test manifests that fail model validation are rejected."""
        data = _zip(
            {
                META_FILENAME: json.dumps({"title": "No id"}),
                SLIDES_FILENAME: "[]",
            }
        )

        with pytest.raises(InvalidPackageError, match="malformed manifest"):
            await codec.deserialize(data)

    async def test_directory_entries_skipped(self, codec):
        """Test directory entries are not reported as files."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr(META_FILENAME, json.dumps({"id": "d", "title": "Dirs"}))
            archive.writestr(SLIDES_FILENAME, "[]")
            archive.writestr(zipfile.ZipInfo("assets/"), b"")
            archive.writestr("assets/readme.txt", b"hello")

        contents = await codec.deserialize(buffer.getvalue())

        assert set(contents.files) == {META_FILENAME, SLIDES_FILENAME, "assets/readme.txt"}
