"""Shared utilities: context, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No audit logic.
"""

from flushaudit.shared.context import (
    BlameContext,
    OperationContext,
    clear_blame_context,
    get_blame_context,
    get_current_actor,
    get_operation_context,
    set_current_actor,
    set_operation_context,
)

__all__ = [
    "BlameContext",
    "OperationContext",
    "clear_blame_context",
    "get_blame_context",
    "get_current_actor",
    "get_operation_context",
    "set_current_actor",
    "set_operation_context",
]
