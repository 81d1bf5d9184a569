"""Data command group: export, import, browser ingestion, co-occurrence."""

from __future__ import annotations

import argparse
from collections.abc import Awaitable, Callable
import logging
from typing import Any

from crosstag.cli_app.common import add_output_arg, execute
from crosstag.clients.browser_bookmarks import ChromeBookmarksFileSource
from crosstag.models import ImportOptions, IngestionOptions
from crosstag.services.common import operation_error, operation_success
from crosstag.services.data_access import DataAccessService
from crosstag.utils.logging_config import log_task_end, log_task_start

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    data_cmd = subparsers.add_parser(
        "data", help="Export, import and browser bookmark ingestion"
    )
    data_sub = data_cmd.add_subparsers(dest="subcommand", required=True)

    export = data_sub.add_parser("export", help="Export the library to JSON")
    export.add_argument(
        "--include-history",
        action="store_true",
        help="Include bookmark click history",
    )
    export.add_argument(
        "--file",
        default=None,
        help="Destination file or directory (default: print the export)",
    )
    add_output_arg(export)

    import_cmd = data_sub.add_parser("import", help="Import an export file")
    import_cmd.add_argument("path", help="Path to the export file")
    import_cmd.add_argument(
        "--mode",
        choices=["overwrite", "incremental"],
        default="incremental",
        help="Replace everything or merge new entities (default: incremental)",
    )
    import_cmd.add_argument(
        "--include-history",
        action="store_true",
        help="Import bookmark click history",
    )
    import_cmd.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file and print entity counts only",
    )
    add_output_arg(import_cmd)

    browser = data_sub.add_parser(
        "browser-import", help="Import bookmarks from a Chromium 'Bookmarks' file"
    )
    browser.add_argument(
        "bookmarks_file",
        nargs="?",
        default=None,
        help="Bookmarks file (default: CROSSTAG_BROWSER_BOOKMARKS_FILE)",
    )
    browser.add_argument(
        "--path-tags",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Convert folder paths into tags (default: enabled)",
    )
    browser.add_argument(
        "--path-mode",
        choices=["hierarchical", "independent"],
        default="hierarchical",
        help="One tag per path or one tag per folder (default: hierarchical)",
    )
    browser.add_argument(
        "--convert-existing",
        action="store_true",
        help="Re-apply path tags to bookmarks that already exist",
    )
    add_output_arg(browser)

    cooccurrence = data_sub.add_parser(
        "cooccurrence", help="Refresh and print the tag co-occurrence index"
    )
    add_output_arg(cooccurrence)


def run(args: argparse.Namespace) -> int:
    async def _export(service: DataAccessService) -> dict[str, Any]:
        if args.file is None:
            snapshot = await service.transfer.export_snapshot(args.include_history)
            return snapshot.to_export()

        target = await service.transfer.write_export(args.file, args.include_history)
        return {"success": True, "path": str(target)}

    async def _import(service: DataAccessService) -> dict[str, Any]:
        file_data = await service.transfer.parse_import_file(args.path)
        counts = {
            "bookmarks": file_data.bookmarks_count,
            "tags": file_data.tags_count,
            "workstations": file_data.workstations_count,
        }
        if args.dry_run:
            return operation_success(
                "import",
                counts,
                message="Dry run: nothing was written",
                extra={"metadata": file_data.metadata.to_export()},
            )

        log_task_start(
            logger,
            "Data import",
            path=args.path,
            mode=args.mode,
            include_history=args.include_history,
            **counts,
        )
        result = await service.transfer.import_data(
            file_data,
            ImportOptions(mode=args.mode, include_history=args.include_history),
        )
        imported = result.imported.model_dump()
        skipped = result.skipped.model_dump()
        log_task_end(
            logger,
            "Data import",
            sum(counts.values()),
            imported=imported,
            skipped=skipped,
        )
        return operation_success(
            "import",
            {
                "imported": sum(imported.values()),
                "skipped": sum(skipped.values()),
                "total": sum(counts.values()),
            },
            extra={"imported": imported, "skipped": skipped},
        )

    async def _browser_import(service: DataAccessService) -> dict[str, Any]:
        path = args.bookmarks_file or service.settings.browser_bookmarks_file
        if path is None:
            return operation_error(
                "browser-import",
                "No browser bookmarks file given",
                details="Pass BOOKMARKS_FILE or set CROSSTAG_BROWSER_BOOKMARKS_FILE",
            )

        options = IngestionOptions(
            convert_path_to_tags=args.path_tags,
            path_mode=args.path_mode,
            convert_existing=args.convert_existing,
        )
        log_task_start(
            logger, "Browser import", source=str(path), **options.model_dump()
        )
        result = await service.browser.import_browser_bookmarks(
            options, source=ChromeBookmarksFileSource(path)
        )
        log_task_end(
            logger,
            "Browser import",
            result.total,
            imported=result.imported,
            skipped=result.skipped,
            updated_existing=result.updated_existing,
        )
        return operation_success("browser-import", result.model_dump())

    async def _cooccurrence(service: DataAccessService) -> dict[str, Any]:
        index = await service.cooccurrence.sync()
        tags = {tag.id: tag.name for tag in await service.tags.get_all_tags()}
        pairs = [
            {
                "pair": key,
                "tags": [tags.get(tag_id, tag_id) for tag_id in key.split("|")],
                "count": count,
            }
            for key, count in sorted(
                index.items(), key=lambda entry: entry[1], reverse=True
            )
        ]
        return {"count": len(pairs), "pairs": pairs}

    handlers: dict[str, Callable[[DataAccessService], Awaitable[dict[str, Any]]]] = {
        "export": _export,
        "import": _import,
        "browser-import": _browser_import,
        "cooccurrence": _cooccurrence,
    }

    handler = handlers.get(args.subcommand)
    if handler is None:
        raise ValueError(f"Unknown data subcommand: {args.subcommand}")

    return execute(args, args.subcommand, handler)


__all__ = ["register", "run"]
