"""Audit tables: schema of the persisted audit record and the sink writing it.

Every audited source table ``<table>`` gets a companion
``<prefix><table><suffix>`` table. Rows are append-only.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from sqlalchemy import JSON, Column, DateTime, Index, MetaData, String, Table
from sqlalchemy.engine import Connection, Engine

from flushaudit.core.config import AuditConfiguration
from flushaudit.core.constants import (
    AUDIT_BLAME_ID_LENGTH,
    AUDIT_BLAME_USER_FIREWALL_LENGTH,
    AUDIT_BLAME_USER_FQDN_LENGTH,
    AUDIT_BLAME_USER_LENGTH,
    AUDIT_DISCRIMINATOR_LENGTH,
    AUDIT_ID_LENGTH,
    AUDIT_INDEXED_COLUMNS,
    AUDIT_IP_LENGTH,
    AUDIT_OBJECT_ID_LENGTH,
    AUDIT_TRANSACTION_HASH_LENGTH,
    AUDIT_TYPE_LENGTH,
)
from flushaudit.domain.exceptions import TransactionStateException
from flushaudit.domain.records import AuditPayload
from flushaudit.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_flush_connection: ContextVar[Connection | None] = ContextVar(
    "flush_connection", default=None
)


def get_flush_connection() -> Connection | None:
    """Connection of the flush being audited, or None outside after_flush."""
    return _flush_connection.get()


@contextmanager
def bind_flush_connection(connection: Connection) -> Iterator[Connection]:
    """Expose ``connection`` to sinks for the duration of the block."""
    token = _flush_connection.set(connection)
    try:
        yield connection
    finally:
        _flush_connection.reset(token)


def audit_index_name(column: str, table_name: str) -> str:
    """``<column>_<md5(table)>_idx``: unique per audit table, short enough for every backend."""
    digest = hashlib.md5(table_name.encode(), usedforsecurity=False).hexdigest()
    return f"{column}_{digest}_idx"


def build_audit_table(
    name: str,
    metadata_obj: MetaData,
    schema: str | None = None,
) -> Table:
    """Define (or return the already defined) audit table ``name`` on ``metadata_obj``."""
    key = f"{schema}.{name}" if schema else name
    if key in metadata_obj.tables:
        return metadata_obj.tables[key]

    table = Table(
        name,
        metadata_obj,
        Column("id", String(AUDIT_ID_LENGTH), primary_key=True),
        Column("type", String(AUDIT_TYPE_LENGTH), nullable=False),
        Column("object_id", String(AUDIT_OBJECT_ID_LENGTH), nullable=False),
        Column("discriminator", String(AUDIT_DISCRIMINATOR_LENGTH), nullable=True),
        Column("transaction_hash", String(AUDIT_TRANSACTION_HASH_LENGTH), nullable=True),
        Column("diffs", JSON, nullable=True),
        Column("blame_id", String(AUDIT_BLAME_ID_LENGTH), nullable=True),
        Column("blame_user", String(AUDIT_BLAME_USER_LENGTH), nullable=True),
        Column("blame_user_fqdn", String(AUDIT_BLAME_USER_FQDN_LENGTH), nullable=True),
        Column("blame_user_firewall", String(AUDIT_BLAME_USER_FIREWALL_LENGTH), nullable=True),
        Column("ip", String(AUDIT_IP_LENGTH), nullable=True),
        Column("created_at", DateTime(timezone=True), nullable=False),
        schema=schema,
    )
    for column in AUDIT_INDEXED_COLUMNS:
        Index(audit_index_name(column, name), table.c[column])
    return table


class TableSink:
    """IAuditSink inserting each payload into its audit table.

    ``bind`` selects where rows go:

    - None (default): the connection of the flush being audited, so audit
      rows commit or roll back together with the audited rows.
    - a Connection, or a zero-argument callable returning one.
    - an Engine: a separate storage space; each payload is written in its
      own transaction on that engine.

    Missing audit tables are created on first use unless ``create_tables``
    is False.
    """

    def __init__(
        self,
        configuration: AuditConfiguration,
        metadata_obj: MetaData | None = None,
        *,
        bind: Engine | Connection | Callable[[], Connection | None] | None = None,
        create_tables: bool = True,
    ) -> None:
        self.configuration = configuration
        self.metadata_obj = metadata_obj or MetaData()
        self.bind = bind
        self.create_tables = create_tables

    def table_for(self, payload: AuditPayload) -> Table:
        name = self.configuration.audit_table_name(payload.table_name)
        return build_audit_table(name, self.metadata_obj, payload.schema)

    def write(self, payload: AuditPayload) -> None:
        if isinstance(self.bind, Engine):
            with self.bind.begin() as connection:
                self._insert(connection, payload)
            return
        connection = self._connection()
        if connection is None:
            raise TransactionStateException("No flush connection bound for the audit table sink")
        self._insert(connection, payload)

    def _connection(self) -> Connection | None:
        if isinstance(self.bind, Connection):
            return self.bind
        if self.bind is None:
            return get_flush_connection()
        return self.bind()

    def _insert(self, connection: Connection, payload: AuditPayload) -> None:
        table = self.table_for(payload)
        if self.create_tables:
            table.create(connection, checkfirst=True)
        connection.execute(table.insert().values(**payload.as_row()))
        logger.debug("Wrote %s audit row %s to %s", payload.type.value, payload.id, table.fullname)
