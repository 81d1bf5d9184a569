"""CLI parser and dispatch registry."""

from __future__ import annotations

import argparse
from collections.abc import Callable

from crosstag.cli_app.commands import bookmarks, data, tags, workstations

CommandRunner = Callable[[argparse.Namespace], int]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CrossTag: tag-based bookmark library with workstations"
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory holding the store file (default: CROSSTAG_DATA_DIR)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Console log level (default: LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    registrars: tuple[Callable[[argparse._SubParsersAction], None], ...] = (
        tags.register,
        bookmarks.register,
        workstations.register,
        data.register,
    )
    for register in registrars:
        register(subparsers)

    return parser


def dispatch(args: argparse.Namespace) -> int:
    command_handlers: dict[str, CommandRunner] = {
        "tags": tags.run,
        "bookmarks": bookmarks.run,
        "workstations": workstations.run,
        "data": data.run,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        raise ValueError(f"Unknown command: {args.command}")
    return handler(args)
