"""
Command-line entry point.

Usage:
    textgraph process notes.txt
    echo "Elon Musk owns Tesla." | textgraph process -
    textgraph process notes.txt --clear --backend memory
    textgraph clear
"""

import argparse
import asyncio
import json
import sys
from typing import Any

from config.settings import GraphBackend, get_settings
from textgraph import __version__
from textgraph.core.exceptions import TextGraphError
from textgraph.core.logging import get_logger
from textgraph.services.container import ServiceContainer


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="textgraph",
        description="Extract entities and relationships from text into a graph store",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--backend",
        choices=[b.value for b in GraphBackend],
        help="Override the configured graph backend",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Process a text file ('-' for stdin)")
    process.add_argument("path", help="Input file, or '-' to read stdin")
    process.add_argument("--clear", action="store_true", help="Clear the graph first")

    subparsers.add_parser("clear", help="Delete every entity and relationship")
    return parser


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


async def run(args: argparse.Namespace) -> dict[str, Any]:
    """Execute one command and return a JSON-serializable result."""
    settings = get_settings()
    if args.backend:
        settings = settings.model_copy(update={"graph_backend": GraphBackend(args.backend)})

    async with ServiceContainer(settings) as container:
        service = container.extraction_service
        if args.command == "clear":
            return await service.clear_graph()

        result = await service.process_text(
            _read_input(args.path),
            clear_before=True if args.clear else None,
        )
        return result.model_dump(mode="json")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        output = asyncio.run(run(args))
    except TextGraphError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
