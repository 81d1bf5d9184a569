"""Common utilities shared across services."""

from .operation_result import operation_error, operation_success

__all__ = [
    "operation_error",
    "operation_success",
]
