"""Shared telemetry: logging setup and tracing helpers."""

from flushaudit.shared.telemetry.logging import get_logger, setup_logging
from flushaudit.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "traced",
    "add_span_attributes",
    "TracedOperation",
]
