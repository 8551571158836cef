"""Persistence: SQLAlchemy metadata, session snapshot, flush listener and audit tables."""

from flushaudit.infrastructure.persistence.audit_table import (
    TableSink,
    audit_index_name,
    bind_flush_connection,
    build_audit_table,
    get_flush_connection,
)
from flushaudit.infrastructure.persistence.listener import (
    AuditFlushListener,
    install_audit_listener,
)
from flushaudit.infrastructure.persistence.metadata import (
    SQLAlchemyMetadataProvider,
    semantic_type_of,
)
from flushaudit.infrastructure.persistence.snapshot import SessionSnapshot, relation_descriptor

__all__ = [
    "AuditFlushListener",
    "SQLAlchemyMetadataProvider",
    "SessionSnapshot",
    "TableSink",
    "audit_index_name",
    "bind_flush_connection",
    "build_audit_table",
    "get_flush_connection",
    "install_audit_listener",
    "relation_descriptor",
    "semantic_type_of",
]
