"""Bookmark command group."""

from __future__ import annotations

import argparse
from collections.abc import Awaitable, Callable
from typing import Any

from crosstag.cli_app.common import add_output_arg, execute, not_found
from crosstag.models import BookmarkCreate, BookmarkUpdate, FilterOptions
from crosstag.services.data_access import DataAccessService


def register(subparsers: argparse._SubParsersAction) -> None:
    bookmarks_cmd = subparsers.add_parser("bookmarks", help="Bookmark operations")
    bookmarks_sub = bookmarks_cmd.add_subparsers(dest="subcommand", required=True)

    list_cmd = bookmarks_sub.add_parser("list", help="List or filter bookmarks")
    list_cmd.add_argument("--query", default=None, help="Match title, note or URL")
    list_cmd.add_argument(
        "--tags", nargs="+", default=[], help="Require every listed tag id"
    )
    list_cmd.add_argument("--pinned", action="store_true", help="Only pinned")
    list_cmd.add_argument("--limit", type=int, default=None)
    add_output_arg(list_cmd)

    add_cmd = bookmarks_sub.add_parser("add", help="Create a bookmark")
    add_cmd.add_argument("--url", required=True)
    add_cmd.add_argument("--title", default="")
    add_cmd.add_argument("--note", default=None)
    add_cmd.add_argument("--tags", nargs="*", default=[], help="Tag ids")
    add_cmd.add_argument("--thumbnail", default=None)
    add_cmd.add_argument("--pinned", action="store_true")
    add_output_arg(add_cmd)

    update = bookmarks_sub.add_parser("update", help="Update a bookmark")
    update.add_argument("--bookmark-id", required=True)
    update.add_argument("--url", default=None)
    update.add_argument("--title", default=None)
    update.add_argument("--note", default=None)
    update.add_argument(
        "--tags", nargs="*", default=None, help="Replace the tag ids"
    )
    update.add_argument("--thumbnail", default=None)
    update.add_argument(
        "--pinned",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Pin or unpin the bookmark",
    )
    add_output_arg(update)

    delete = bookmarks_sub.add_parser("delete", help="Delete a bookmark")
    delete.add_argument("--bookmark-id", required=True)
    add_output_arg(delete)

    click = bookmarks_sub.add_parser("click", help="Record a bookmark click")
    click.add_argument("--bookmark-id", required=True)
    add_output_arg(click)

    hot = bookmarks_sub.add_parser("hot", help="Most clicked bookmarks")
    hot.add_argument("--limit", type=int, default=None)
    add_output_arg(hot)


def run(args: argparse.Namespace) -> int:
    async def _list_bookmarks(service: DataAccessService) -> dict[str, Any]:
        bookmarks = await service.bookmarks.filter_bookmarks(
            FilterOptions(query=args.query, tags=args.tags, only_pinned=args.pinned)
        )
        if args.limit is not None:
            bookmarks = bookmarks[: args.limit]
        return {
            "query": {"query": args.query, "tags": args.tags, "pinned": args.pinned},
            "count": len(bookmarks),
            "bookmarks": [bookmark.to_storage() for bookmark in bookmarks],
        }

    async def _add_bookmark(service: DataAccessService) -> dict[str, Any]:
        bookmark = await service.bookmarks.create_bookmark(
            BookmarkCreate(
                url=args.url,
                title=args.title,
                note=args.note,
                tags=args.tags,
                thumbnail=args.thumbnail,
                pinned=args.pinned,
            )
        )
        return {"success": True, "bookmark": bookmark.to_storage()}

    async def _update_bookmark(service: DataAccessService) -> dict[str, Any]:
        patch = BookmarkUpdate.model_validate(
            {
                key: value
                for key, value in {
                    "url": args.url,
                    "title": args.title,
                    "note": args.note,
                    "tags": args.tags,
                    "thumbnail": args.thumbnail,
                    "pinned": args.pinned,
                }.items()
                if value is not None
            }
        )
        bookmark = await service.bookmarks.update_bookmark(args.bookmark_id, patch)
        if bookmark is None:
            return not_found("Bookmark", args.bookmark_id)
        return {"success": True, "bookmark": bookmark.to_storage()}

    async def _delete_bookmark(service: DataAccessService) -> dict[str, Any]:
        if not await service.bookmarks.delete_bookmark(args.bookmark_id):
            return not_found("Bookmark", args.bookmark_id)
        return {"success": True, "deleted": args.bookmark_id}

    async def _click_bookmark(service: DataAccessService) -> dict[str, Any]:
        bookmark = await service.bookmarks.increment_click(args.bookmark_id)
        if bookmark is None:
            return not_found("Bookmark", args.bookmark_id)
        return {
            "success": True,
            "bookmark_id": bookmark.id,
            "click_count": bookmark.click_count,
        }

    async def _hot_bookmarks(service: DataAccessService) -> dict[str, Any]:
        limit = args.limit or service.settings.hot_bookmarks_limit
        bookmarks = await service.bookmarks.get_hot_bookmarks(limit=limit)
        return {
            "count": len(bookmarks),
            "bookmarks": [bookmark.to_storage() for bookmark in bookmarks],
        }

    handlers: dict[str, Callable[[DataAccessService], Awaitable[dict[str, Any]]]] = {
        "list": _list_bookmarks,
        "add": _add_bookmark,
        "update": _update_bookmark,
        "delete": _delete_bookmark,
        "click": _click_bookmark,
        "hot": _hot_bookmarks,
    }

    handler = handlers.get(args.subcommand)
    if handler is None:
        raise ValueError(f"Unknown bookmarks subcommand: {args.subcommand}")

    return execute(args, f"bookmarks {args.subcommand}", handler)


__all__ = ["register", "run"]
