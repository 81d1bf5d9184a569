"""Workstation command group."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
import webbrowser

from crosstag.cli_app.common import add_output_arg, execute, not_found
from crosstag.models import WorkstationCreate
from crosstag.services.data_access import DataAccessService


def register(subparsers: argparse._SubParsersAction) -> None:
    ws_cmd = subparsers.add_parser("workstations", help="Workstation operations")
    ws_sub = ws_cmd.add_subparsers(dest="subcommand", required=True)

    list_cmd = ws_sub.add_parser("list", help="List workstations")
    add_output_arg(list_cmd)

    add_cmd = ws_sub.add_parser("add", help="Create a workstation")
    add_cmd.add_argument("--name", required=True)
    add_cmd.add_argument("--description", default=None)
    add_cmd.add_argument(
        "--color", default=None, help="Explicit color (default: least used)"
    )
    add_cmd.add_argument("--pinned", action="store_true")
    add_output_arg(add_cmd)

    delete = ws_sub.add_parser("delete", help="Delete a workstation")
    delete.add_argument("--workstation-id", required=True)
    add_output_arg(delete)

    add_bm = ws_sub.add_parser("add-bookmark", help="Add a bookmark to a workstation")
    add_bm.add_argument("--workstation-id", required=True)
    add_bm.add_argument("--bookmark-id", required=True)
    add_output_arg(add_bm)

    remove_bm = ws_sub.add_parser(
        "remove-bookmark", help="Remove a bookmark from a workstation"
    )
    remove_bm.add_argument("--workstation-id", required=True)
    remove_bm.add_argument("--bookmark-id", required=True)
    add_output_arg(remove_bm)

    open_cmd = ws_sub.add_parser(
        "open", help="Resolve a workstation's URLs and count the open"
    )
    open_cmd.add_argument("--workstation-id", required=True)
    open_cmd.add_argument(
        "--launch",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Open the URLs in the default web browser (default: disabled)",
    )
    add_output_arg(open_cmd)


async def _open_in_browser(urls: list[str]) -> None:
    for url in urls:
        await asyncio.to_thread(webbrowser.open_new_tab, url)


def run(args: argparse.Namespace) -> int:
    async def _list_workstations(service: DataAccessService) -> dict[str, Any]:
        workstations = await service.workstations.get_all_workstations()
        return {
            "count": len(workstations),
            "workstations": [ws.to_storage() for ws in workstations],
        }

    async def _add_workstation(service: DataAccessService) -> dict[str, Any]:
        workstation = await service.workstations.create_workstation(
            WorkstationCreate(
                name=args.name,
                description=args.description,
                color=args.color,
                pinned=args.pinned,
            )
        )
        return {"success": True, "workstation": workstation.to_storage()}

    async def _delete_workstation(service: DataAccessService) -> dict[str, Any]:
        if not await service.workstations.delete_workstation(args.workstation_id):
            return not_found("Workstation", args.workstation_id)
        return {"success": True, "deleted": args.workstation_id}

    async def _add_bookmark(service: DataAccessService) -> dict[str, Any]:
        workstation = await service.workstations.add_bookmark_to_workstation(
            args.workstation_id, args.bookmark_id
        )
        if workstation is None:
            return not_found("Workstation", args.workstation_id)
        return {"success": True, "workstation": workstation.to_storage()}

    async def _remove_bookmark(service: DataAccessService) -> dict[str, Any]:
        workstation = await service.workstations.remove_bookmark_from_workstation(
            args.workstation_id, args.bookmark_id
        )
        if workstation is None:
            return not_found("Workstation", args.workstation_id)
        return {"success": True, "workstation": workstation.to_storage()}

    async def _open_workstation(service: DataAccessService) -> dict[str, Any]:
        urls = await service.workstations.open_workstation(
            args.workstation_id,
            opener=_open_in_browser if args.launch else None,
        )
        if urls is None:
            return not_found("Workstation", args.workstation_id)
        return {"success": True, "count": len(urls), "urls": urls}

    handlers: dict[str, Callable[[DataAccessService], Awaitable[dict[str, Any]]]] = {
        "list": _list_workstations,
        "add": _add_workstation,
        "delete": _delete_workstation,
        "add-bookmark": _add_bookmark,
        "remove-bookmark": _remove_bookmark,
        "open": _open_workstation,
    }

    handler = handlers.get(args.subcommand)
    if handler is None:
        raise ValueError(f"Unknown workstations subcommand: {args.subcommand}")

    return execute(args, f"workstations {args.subcommand}", handler)


__all__ = ["register", "run"]
