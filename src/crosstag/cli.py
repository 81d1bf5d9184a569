"""
Command-line interface for CrossTag.
"""

import sys

from crosstag.cli_app.registry import build_parser, dispatch
from crosstag.settings import get_settings
from crosstag.utils.logging_config import initialize_logging, resolve_log_level


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    initialize_logging(
        resolve_log_level(args.log_level),
        log_to_file=get_settings().log_to_file,
    )

    if not args.command:
        parser.print_help()
        return 1

    return dispatch(args)


if __name__ == "__main__":
    sys.exit(main())
