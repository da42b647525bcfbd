"""Query the LoreRAG knowledge base from the command line.

Usage::

    python -m lorerag.cli.query lookup "how are chunks fingerprinted?" --k 4
    python -m lorerag.cli.query ask "what does the retriever fuse?" --json

``--json`` prints the response envelope exactly as the HTTP API returns it.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from lorerag.config import load_settings
from lorerag.models.lore import AnswerResponse, SearchHit, SearchResponse
from lorerag.utils.errors import LoreRAGError
from lorerag.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_hit(rank: int, hit: SearchHit) -> str:
    location = hit.source_path + (f"#{hit.anchor_id}" if hit.anchor_id else "")
    sparse = "-" if hit.sparse_score is None else f"{hit.sparse_score:.3f}"
    lines = [
        f"{rank:>2}. {location}",
        f"    fused={hit.fused_score:.3f}  dense={hit.dense_score:.3f}  sparse={sparse}",
    ]
    if hit.title:
        lines.append(f"    Section: {hit.title}")
    if hit.excerpt:
        lines.append(f"    {hit.excerpt}")
    return "\n".join(lines)


def format_lookup(response: SearchResponse) -> str:
    if not response.hits:
        return f"No results for: {response.question}"
    lines = [f"Results for: {response.question}", ""]
    lines.extend(_format_hit(rank, hit) for rank, hit in enumerate(response.hits, start=1))
    return "\n".join(lines)


def format_answer(response: AnswerResponse) -> str:
    lines = [response.answer, "", "Sources:"]
    if not response.sources:
        lines.append("  (none)")
    for rank, hit in enumerate(response.sources, start=1):
        lines.append(f"  {rank}. {hit.source_path}" + (f" - {hit.title}" if hit.title else ""))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace, components: dict[str, Any]) -> int:
    retriever = components["retriever"]
    # Reject bad input before the pool opens or any DDL runs.
    retriever.validate(args.query, retriever.default_k if args.k is None else args.k)

    store = components["store"]
    await store.initialize()
    try:
        if args.command == "lookup":
            response: SearchResponse | AnswerResponse = await retriever.lookup(
                args.query, args.k
            )
        else:
            response = await components["answer_service"].ask(args.query, args.k)
    finally:
        await store.close()

    if args.json_output:
        print(response.model_dump_json(indent=2))
    elif isinstance(response, SearchResponse):
        print(format_lookup(response))
    else:
        print(format_answer(response))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m lorerag.cli.query",
        description="Search the LoreRAG knowledge base or ask it a question.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to the YAML configuration file (default: config/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Query commands")

    for name, help_text in (
        ("lookup", "Ranked hybrid search hits"),
        ("ask", "Answer grounded in the top hits"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("query", help="Query or question text")
        sub.add_argument("--k", type=int, default=None, help="Number of hits (default from config)")
        sub.add_argument(
            "--json",
            action="store_true",
            dest="json_output",
            help="Print the response as JSON",
        )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits 1 on invalid input or any collaborator failure."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = load_settings(args.config)
        configure_logging(log_level=settings.log_level)

        from lorerag.wiring import build_components

        exit_code = asyncio.run(_run(args, build_components(settings)))
    except LoreRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
