"""Session event wiring: collect in before_flush, process in after_flush.

before_flush sees the pending lists before SQLAlchemy clears them;
after_flush runs once generated keys are populated and while attribute
history is still intact, inside the same database transaction as the
audited rows. A sink that raises there aborts the flush.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from flushaudit.application.interfaces.services import IAuditSink
from flushaudit.application.services.audit_manager import AuditManager
from flushaudit.core.config import AuditConfiguration
from flushaudit.core.constants import SESSION_INFO_KEY
from flushaudit.infrastructure.persistence.audit_table import TableSink, bind_flush_connection
from flushaudit.infrastructure.persistence.metadata import SQLAlchemyMetadataProvider
from flushaudit.infrastructure.persistence.snapshot import SessionSnapshot
from flushaudit.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# instances entering the persistent state
_LIFECYCLE_EVENTS = ("pending_to_persistent", "loaded_as_persistent", "detached_to_persistent")


def _keep_original(target: Any, value: Any, oldvalue: Any, initiator: Any) -> None:
    """No-op: registered for its active_history side effect."""


class AuditFlushListener:
    """Binds an AuditManager to session flush events."""

    def __init__(self, manager: AuditManager) -> None:
        self.manager = manager
        self._targets: list[Any] = []
        self._tracked_classes: set[type] = set()
        self._attribute_listeners: list[Any] = []

    def before_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        transaction = self.manager.create_transaction(SessionSnapshot(session))
        transaction.collect()
        if transaction.is_empty:
            session.info.pop(SESSION_INFO_KEY, None)
            return
        session.info[SESSION_INFO_KEY] = transaction

    def after_flush(self, session: Session, flush_context: Any) -> None:
        transaction = session.info.pop(SESSION_INFO_KEY, None)
        if transaction is None:
            return
        with bind_flush_connection(session.connection()):
            self.manager.process(transaction)

    def after_soft_rollback(self, session: Session, previous_transaction: Any) -> None:
        if session.info.pop(SESSION_INFO_KEY, None) is not None:
            logger.debug("Discarded pending audit transaction after rollback")

    def track_original_values(self, session: Session, instance: Any) -> None:
        """Make attribute sets of audited classes load the value they replace.

        Assigning to an expired attribute (after commit) otherwise records
        no old value.
        """
        cls = type(instance)
        if cls in self._tracked_classes:
            return
        self._tracked_classes.add(cls)
        if not self.manager.configuration.is_auditable(cls):
            return
        mapper = inspect(cls)
        keys = [prop.key for prop in mapper.column_attrs]
        keys += [rel.key for rel in mapper.relationships if not rel.uselist]
        for key in keys:
            attribute = getattr(cls, key)
            event.listen(attribute, "set", _keep_original, active_history=True)
            self._attribute_listeners.append(attribute)

    def attach(self, target: Any) -> None:
        """Listen on a Session, sessionmaker, Session subclass or AsyncSession."""
        target = _event_target(target)
        event.listen(target, "before_flush", self.before_flush)
        event.listen(target, "after_flush", self.after_flush)
        event.listen(target, "after_soft_rollback", self.after_soft_rollback)
        for name in _LIFECYCLE_EVENTS:
            event.listen(target, name, self.track_original_values)
        self._targets.append(target)

    def detach(self) -> None:
        """Remove the listeners from every attached target."""
        for target in self._targets:
            event.remove(target, "before_flush", self.before_flush)
            event.remove(target, "after_flush", self.after_flush)
            event.remove(target, "after_soft_rollback", self.after_soft_rollback)
            for name in _LIFECYCLE_EVENTS:
                event.remove(target, name, self.track_original_values)
        self._targets.clear()
        for attribute in self._attribute_listeners:
            event.remove(attribute, "set", _keep_original)
        self._attribute_listeners.clear()
        self._tracked_classes.clear()


def _event_target(target: Any) -> Any:
    if isinstance(target, AsyncSession):
        return target.sync_session
    return target


def install_audit_listener(
    target: Any,
    configuration: AuditConfiguration | None = None,
    sink: IAuditSink | None = None,
    metadata: SQLAlchemyMetadataProvider | None = None,
) -> AuditFlushListener:
    """Build the audit pipeline and attach it to ``target``.

    Without an explicit sink, payloads are written to the audit tables on
    the flushing connection (TableSink).
    """
    configuration = configuration or AuditConfiguration()
    manager = AuditManager(
        configuration,
        metadata or SQLAlchemyMetadataProvider(),
        sink or TableSink(configuration),
    )
    listener = AuditFlushListener(manager)
    listener.attach(target)
    logger.info("Audit listener installed on %s", type(target).__name__)
    return listener
