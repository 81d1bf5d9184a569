"""Shared response envelope for batch service operations."""

from typing import Any


def operation_success(
    operation: str,
    metrics: dict[str, int],
    *,
    message: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a standardized success response."""
    payload: dict[str, Any] = {
        "success": True,
        "operation": operation,
        "status": "completed",
        "message": message,
        "metrics": metrics,
    }
    if extra:
        payload.update(extra)
    return payload


def operation_error(
    operation: str,
    error: str,
    *,
    details: Any = None,
    status: str = "failed",
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a standardized error response."""
    payload: dict[str, Any] = {
        "success": False,
        "operation": operation,
        "status": status,
        "error": error,
        "metrics": {"imported": 0, "skipped": 0, "updated": 0, "total": 0},
    }
    if details is not None:
        payload["details"] = details
    if extra:
        payload.update(extra)
    return payload
