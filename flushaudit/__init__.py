"""flushaudit: audit records for SQLAlchemy unit-of-work flushes.

Typical wiring::

    from flushaudit import AuditConfiguration, install_audit_listener

    install_audit_listener(SessionLocal, AuditConfiguration())
"""

from flushaudit.application.services import AuditManager, AuditTransaction
from flushaudit.core.config import AuditConfiguration, AuditSettings, get_settings
from flushaudit.domain import AuditAction, AuditException, AuditPayload
from flushaudit.infrastructure.persistence import (
    AuditFlushListener,
    SQLAlchemyMetadataProvider,
    TableSink,
    install_audit_listener,
)
from flushaudit.infrastructure.sinks import CompositeSink, InMemorySink, LoggingSink
from flushaudit.middleware import BlameContextMiddleware
from flushaudit.shared.context import set_current_actor, set_operation_context

__version__ = "0.1.0"

__all__ = [
    "AuditAction",
    "AuditConfiguration",
    "AuditException",
    "AuditFlushListener",
    "AuditManager",
    "AuditPayload",
    "AuditSettings",
    "AuditTransaction",
    "BlameContextMiddleware",
    "CompositeSink",
    "InMemorySink",
    "LoggingSink",
    "SQLAlchemyMetadataProvider",
    "TableSink",
    "get_settings",
    "install_audit_listener",
    "set_current_actor",
    "set_operation_context",
]
