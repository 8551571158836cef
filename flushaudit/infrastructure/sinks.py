"""In-process audit sinks."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flushaudit.application.interfaces.services import IAuditSink
from flushaudit.domain.enums import AuditAction
from flushaudit.domain.records import AuditPayload
from flushaudit.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class InMemorySink:
    """Keeps every payload in a list. Useful in tests and for inspection."""

    def __init__(self) -> None:
        self.payloads: list[AuditPayload] = []

    def write(self, payload: AuditPayload) -> None:
        self.payloads.append(payload)

    def of_type(self, action: AuditAction) -> list[AuditPayload]:
        return [p for p in self.payloads if p.type is action]

    def clear(self) -> None:
        self.payloads.clear()


class LoggingSink:
    """Emits one structured log record per payload."""

    def __init__(
        self, level: int = logging.INFO, sink_logger: logging.Logger | None = None
    ) -> None:
        self.level = level
        self.logger = sink_logger or logger

    def write(self, payload: AuditPayload) -> None:
        self.logger.log(
            self.level,
            "audit %s %s#%s (transaction %s)",
            payload.type.value,
            payload.entity,
            payload.object_id,
            payload.transaction_hash,
            extra={"audit": payload.to_dict()},
        )


class CompositeSink:
    """Fans each payload out to several sinks, in order. The first failure propagates."""

    def __init__(self, sinks: Iterable[IAuditSink]) -> None:
        self.sinks = list(sinks)

    def write(self, payload: AuditPayload) -> None:
        for sink in self.sinks:
            sink.write(payload)
