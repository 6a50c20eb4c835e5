"""Unit tests for the command line interface."""

import json
import zipfile

import pytest
from structlog.testing import capture_logs

from deckpack.__main__ import (
    create_parser,
    default_output,
    run_export,
    run_import,
    run_inspect,
)
from deckpack.storage import FileAssetStore


@pytest.fixture
def file_store(tmp_path) -> FileAssetStore:
    """File store in a temp directory."""
    return FileAssetStore(tmp_path / "assets")


@pytest.fixture
def deck_file(tmp_path, png_data_uri):
    """A working document written to disk."""
    path = tmp_path / "deck.json"
    path.write_text(
        json.dumps(
            {
                "meta": {"id": "cli-deck", "title": "CLI Deck", "coverImage": png_data_uri},
                "slides": [{"id": "s1", "notes": "hi"}],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestParser:
    """Test argument parsing."""

    def test_export_args(self):
        """Test export options."""
        args = create_parser().parse_args(["export", "deck.json", "-o", "out.lume", "--no-assets"])
        assert args.command == "export"
        assert args.input == "deck.json"
        assert args.output == "out.lume"
        assert args.no_assets is True

    def test_global_assets_dir(self):
        """Test the asset directory option precedes the subcommand."""
        args = create_parser().parse_args(["--assets-dir", "/tmp/a", "inspect", "x.lume"])
        assert args.assets_dir == "/tmp/a"
        assert args.command == "inspect"

    def test_default_output(self):
        """Test archives default to dist/<deck id>.lume."""
        assert default_output("abc").as_posix() == "dist/abc.lume"


class TestCommands:
    """Test command handlers."""

    async def test_export_import_inspect(self, tmp_path, deck_file, file_store, capsys):
        """Test a deck survives export and import through files."""
        parser = create_parser()
        archive_path = tmp_path / "out" / "deck.lume"

        code = await run_export(
            parser.parse_args(["export", str(deck_file), "-o", str(archive_path)]), file_store
        )
        assert code == 0
        with zipfile.ZipFile(archive_path) as archive:
            assert any(name.startswith("assets/") for name in archive.namelist())

        restored_path = tmp_path / "restored.json"
        code = await run_import(
            parser.parse_args(["import", str(archive_path), "-o", str(restored_path)]),
            FileAssetStore(tmp_path / "other-assets"),
        )
        assert code == 0
        restored = json.loads(restored_path.read_text(encoding="utf-8"))
        assert restored["meta"]["coverImage"].startswith("asset://sha256:")
        assert restored["slides"][0]["notes"] == "hi"

        capsys.readouterr()
        with capture_logs():
            code = await run_inspect(parser.parse_args(["inspect", str(archive_path)]))
        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["id"] == "cli-deck"
        assert summary["slides"] == 1
        assert len(summary["assets"]) == 1

    async def test_import_to_stdout(self, tmp_path, deck_file, file_store, capsys):
        """Test import prints the document when no output is given."""
        parser = create_parser()
        archive_path = tmp_path / "deck.lume"
        await run_export(
            parser.parse_args(["export", str(deck_file), "-o", str(archive_path), "--no-assets"]),
            file_store,
        )
        capsys.readouterr()

        with capture_logs() as logs:
            await run_import(parser.parse_args(["import", str(archive_path)]), file_store)

        document = json.loads(capsys.readouterr().out)
        assert document["meta"]["id"] == "cli-deck"
        assert "package_imported" in [entry["event"] for entry in logs]
