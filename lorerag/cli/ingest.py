# =============================================================================
# lorerag/cli/ingest.py - Knowledge Base Management
# =============================================================================
#
# Standalone CLI for building and inspecting the LoreRAG chunk store
# outside of the web server.
#
# Supported subcommands:
#
#   init-db  - Create the pgvector extension, chunk table and indexes
#   ingest   - Ingest every Markdown file under a directory
#   stats    - Show the number of stored chunks
#
# Usage examples:
#   python -m lorerag.cli.ingest init-db
#   python -m lorerag.cli.ingest ingest --path ./docs
#   python -m lorerag.cli.ingest stats
# =============================================================================

"""Standalone CLI for managing the LoreRAG chunk store.

Usage::

    python -m lorerag.cli.ingest init-db
    python -m lorerag.cli.ingest ingest --path ./docs
    python -m lorerag.cli.ingest stats

Re-running ``ingest`` over the same tree is safe: chunks whose content
hash is already stored are skipped.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from lorerag.config import Settings, load_settings
from lorerag.utils.errors import LoreRAGError
from lorerag.utils.logging import configure_logging


def _build(settings: Settings) -> dict[str, Any]:
    from lorerag.wiring import build_components

    return build_components(settings)


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_init_db(components: dict[str, Any]) -> int:
    """Create the schema; safe to repeat."""
    store = components["store"]
    await store.initialize()
    await store.close()
    print(f"Chunk store initialised: table {components['settings'].database.table}")
    return 0


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a directory and print the run summary."""
    store = components["store"]
    service = components["ingestion_service"]

    print(f"Ingesting directory: {args.path}")
    print(f"  Embedding: {components['embedding_gateway'].provider_name}")

    await store.initialize()
    try:
        result = await service.ingest_directory(args.path)
    finally:
        await store.close()

    print("\nIngestion complete:")
    print(f"  Files processed: {result.files_processed}")
    print(f"  Chunks created:  {result.created}")
    print(f"  Chunks skipped:  {result.skipped}")
    print(f"  Time:            {result.elapsed_ms / 1000:.2f}s")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):", file=sys.stderr)
        for error in result.errors:
            print(f"    {error}", file=sys.stderr)
        return 1
    return 0


async def _handle_stats(components: dict[str, Any]) -> int:
    """Display chunk store statistics."""
    store = components["store"]
    await store.initialize()
    try:
        total = await store.count()
    finally:
        await store.close()

    print("Knowledge Base Statistics")
    print("=" * 40)
    print(f"  Total chunks:  {total}")
    print(f"  Table:         {components['settings'].database.table}")
    print(f"  Dimensions:    {components['embedding_gateway'].dimensions}")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m lorerag.cli.ingest",
        description="Manage the LoreRAG chunk store.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to the YAML configuration file (default: config/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Management commands")

    subparsers.add_parser("init-db", help="Create the extension, table and indexes")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest a directory of Markdown")
    ingest_parser.add_argument("--path", required=True, help="Directory path")

    subparsers.add_parser("stats", help="Show chunk store statistics")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _dispatch(args: argparse.Namespace, components: dict[str, Any]) -> int:
    if args.command == "init-db":
        return await _handle_init_db(components)
    if args.command == "ingest":
        return await _handle_ingest(args, components)
    return await _handle_stats(components)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits 0 on success and 1 on any failure."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = load_settings(args.config)
        configure_logging(log_level=settings.log_level)
        exit_code = asyncio.run(_dispatch(args, _build(settings)))
    except LoreRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
