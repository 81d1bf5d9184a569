"""Helpers shared by CLI command groups."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Awaitable, Callable
import logging
from pathlib import Path
from typing import Any

from crosstag.cli_app.output import emit
from crosstag.services.common import operation_error
from crosstag.services.data_access import DataAccessService
from crosstag.settings import get_settings
from crosstag.utils.errors import CrossTagError

logger = logging.getLogger(__name__)

ServiceHandler = Callable[[DataAccessService], Awaitable[dict[str, Any]]]


def add_output_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )


def build_data_service(args: argparse.Namespace) -> DataAccessService:
    """Create the data service, honoring a ``--data-dir`` override."""
    settings = get_settings()
    data_dir = getattr(args, "data_dir", None)
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": Path(data_dir)})
    return DataAccessService(settings=settings)


def not_found(kind: str, entity_id: str) -> dict[str, Any]:
    return {"success": False, "error": f"{kind} not found: {entity_id}"}


def exit_code(payload: Any) -> int:
    if not isinstance(payload, dict):
        return 0
    if payload.get("error"):
        return 1
    if payload.get("success") is False:
        return 1
    return 0


def execute(args: argparse.Namespace, operation: str, handler: ServiceHandler) -> int:
    """
    Run one handler against a freshly initialized data service.

    ``CrossTagError`` is reported as an error payload instead of a
    traceback. The exit code is derived from the emitted payload.
    """

    async def _run() -> dict[str, Any]:
        service = build_data_service(args)
        await service.initialize()
        return await handler(service)

    try:
        payload = asyncio.run(_run())
    except CrossTagError as e:
        logger.error(f"{operation} failed: {e}")
        payload = operation_error(operation, e.message, details=e.suggestion)

    emit(args, payload)
    return exit_code(payload)
