"""Tag command group."""

from __future__ import annotations

import argparse
from collections.abc import Awaitable, Callable
from typing import Any

from crosstag.cli_app.common import add_output_arg, execute, not_found
from crosstag.models import TagCreate, TagUpdate
from crosstag.services.data_access import DataAccessService


def register(subparsers: argparse._SubParsersAction) -> None:
    tags_cmd = subparsers.add_parser("tags", help="Tag operations")
    tags_sub = tags_cmd.add_subparsers(dest="subcommand", required=True)

    list_cmd = tags_sub.add_parser("list", help="List tags")
    list_cmd.add_argument(
        "--hot",
        action="store_true",
        help="Only the most clicked tags",
    )
    list_cmd.add_argument("--limit", type=int, default=None)
    add_output_arg(list_cmd)

    add_cmd = tags_sub.add_parser("add", help="Create a tag")
    add_cmd.add_argument("--name", required=True)
    add_cmd.add_argument(
        "--color", default=None, help="Explicit color (default: least used)"
    )
    add_cmd.add_argument("--description", default=None)
    add_output_arg(add_cmd)

    update = tags_sub.add_parser("update", help="Update a tag")
    update.add_argument("--tag-id", required=True)
    update.add_argument("--name", default=None)
    update.add_argument("--color", default=None)
    update.add_argument("--description", default=None)
    update.add_argument(
        "--pinned",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Pin or unpin the tag",
    )
    add_output_arg(update)

    delete = tags_sub.add_parser(
        "delete", help="Delete a tag and remove it from every bookmark"
    )
    delete.add_argument("--tag-id", required=True)
    add_output_arg(delete)


def run(args: argparse.Namespace) -> int:
    async def _list_tags(service: DataAccessService) -> dict[str, Any]:
        if args.hot:
            limit = args.limit or service.settings.hot_tags_limit
            tags = await service.tags.get_hot_tags(limit=limit)
        else:
            tags = await service.tags.get_all_tags()
            if args.limit is not None:
                tags = tags[: args.limit]
        return {"count": len(tags), "tags": [tag.to_storage() for tag in tags]}

    async def _add_tag(service: DataAccessService) -> dict[str, Any]:
        tag = await service.tags.create_tag(
            TagCreate(name=args.name, color=args.color, description=args.description)
        )
        return {"success": True, "tag": tag.to_storage()}

    async def _update_tag(service: DataAccessService) -> dict[str, Any]:
        patch = TagUpdate.model_validate(
            {
                key: value
                for key, value in {
                    "name": args.name,
                    "color": args.color,
                    "description": args.description,
                    "pinned": args.pinned,
                }.items()
                if value is not None
            }
        )
        tag = await service.tags.update_tag(args.tag_id, patch)
        if tag is None:
            return not_found("Tag", args.tag_id)
        return {"success": True, "tag": tag.to_storage()}

    async def _delete_tag(service: DataAccessService) -> dict[str, Any]:
        if not await service.tags.delete_tag(args.tag_id):
            return not_found("Tag", args.tag_id)
        return {"success": True, "deleted": args.tag_id}

    handlers: dict[str, Callable[[DataAccessService], Awaitable[dict[str, Any]]]] = {
        "list": _list_tags,
        "add": _add_tag,
        "update": _update_tag,
        "delete": _delete_tag,
    }

    handler = handlers.get(args.subcommand)
    if handler is None:
        raise ValueError(f"Unknown tags subcommand: {args.subcommand}")

    return execute(args, f"tags {args.subcommand}", handler)


__all__ = ["register", "run"]
