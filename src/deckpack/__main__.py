"""Command line entry point.

Usage:
    # Export a deck JSON file to a .lume archive
    python -m deckpack export deck.json -o dist/deck.lume

    # Import a .lume archive back into deck JSON
    python -m deckpack import dist/deck.lume -o deck.json

    # Show what an archive contains
    python -m deckpack inspect dist/deck.lume

    # Run the HTTP API
    python -m deckpack serve
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import settings
from .models import DeckPackError, WorkingDocument
from .services import PackageCodec, PackageService
from .storage import FileAssetStore
from .utils.logging import setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="deckpack",
        description="Portable deck packages with content-addressed assets",
    )
    parser.add_argument(
        "--assets-dir",
        default=None,
        help=f"Asset store directory (default: {settings.assets_dir})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    export_parser = subparsers.add_parser("export", help="Export a deck JSON file to .lume")
    export_parser.add_argument("input", help="Path to the working document JSON")
    export_parser.add_argument("--output", "-o", help="Destination .lume file")
    export_parser.add_argument(
        "--no-assets",
        action="store_true",
        help="Do not copy asset bytes into the archive",
    )

    import_parser = subparsers.add_parser("import", help="Import a .lume archive")
    import_parser.add_argument("input", help="Path to the .lume archive")
    import_parser.add_argument("--output", "-o", help="Destination JSON file (default: stdout)")

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a .lume archive")
    inspect_parser.add_argument("input", help="Path to the .lume archive")

    subparsers.add_parser("serve", help="Run the HTTP API")

    return parser


def default_output(deck_id: str) -> Path:
    """Default archive path for a deck."""
    return Path("dist") / f"{deck_id}.lume"


async def run_export(args: argparse.Namespace, store: FileAssetStore) -> int:
    document = WorkingDocument.model_validate_json(Path(args.input).read_text(encoding="utf-8"))
    result = await PackageService(store).export_document(
        document, include_assets=not args.no_assets
    )

    output = Path(args.output) if args.output else default_output(document.meta.id)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.archive)

    print(f"Exported {document.meta.title} to {output}")
    print(f"  assets: {len(result.document.assets)} referenced, {len(result.asset_paths)} packaged")
    for warning in result.warnings:
        print(f"  warning: {warning.path}: {warning.message}", file=sys.stderr)
    return 0


async def run_import(args: argparse.Namespace, store: FileAssetStore) -> int:
    result = await PackageService(store).import_package(Path(args.input).read_bytes())
    payload = json.dumps(result.document.to_json_dict(), indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Imported {result.document.meta.title} to {args.output}")
        print(f"  assets stored: {len(result.imported)}")
    else:
        print(payload)
    return 0


async def run_inspect(args: argparse.Namespace) -> int:
    contents = await PackageCodec().deserialize(Path(args.input).read_bytes())
    document = contents.document
    summary = {
        "id": document.meta.id,
        "title": document.meta.title,
        "schema": document.schema_stamp.to_json_dict(),
        "slides": len(document.slides),
        "assets": list(document.assets),
        "files": sorted(contents.files),
    }
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    """Entry point for the deckpack CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(level=settings.log_level, log_format=settings.log_format)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("deckpack.main:app", host=settings.host, port=settings.port)
        return

    store = FileAssetStore(args.assets_dir) if args.assets_dir else FileAssetStore()

    if args.command == "export":
        runner = run_export(args, store)
    elif args.command == "import":
        runner = run_import(args, store)
    elif args.command == "inspect":
        runner = run_inspect(args)
    else:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = asyncio.run(runner)
    except DeckPackError as e:
        print(f"error: {e.message}", file=sys.stderr)
        exit_code = 1
    except ValidationError as e:
        print(f"error: invalid deck document\n{e}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
