"""Audit manager: turns a collected transaction into audit payloads.

Payloads for the whole transaction are assembled first and only then
handed to the sink, so any failure while assembling leaves the sink
untouched for that transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flushaudit.application.interfaces.metadata import IMetadataProvider, TableInfo
from flushaudit.application.interfaces.services import IAuditSink
from flushaudit.application.interfaces.snapshot import ITransactionalSnapshot
from flushaudit.application.services.blame_resolver import BlameResolver
from flushaudit.application.services.diff_engine import DiffEngine
from flushaudit.application.services.entity_summarizer import EntitySummarizer
from flushaudit.application.services.identity_resolver import IdentityResolver
from flushaudit.application.services.transaction import AuditTransaction
from flushaudit.application.services.value_normalizer import ValueNormalizer
from flushaudit.core.config import AuditConfiguration
from flushaudit.domain.enums import AuditAction, InheritanceMode
from flushaudit.domain.exceptions import IdentityResolutionException
from flushaudit.domain.records import (
    Associate,
    AuditPayload,
    Blame,
    Dissociate,
    Insert,
    RelationDescriptor,
    Remove,
    Update,
    merge_changesets,
)
from flushaudit.shared.context import BlameContext, get_blame_context
from flushaudit.shared.telemetry.logging import get_logger
from flushaudit.shared.telemetry.tracing import TracedOperation
from flushaudit.shared.utils.datetime import now_in
from flushaudit.shared.utils.generators import generate_cuid
from flushaudit.shared.utils.serialization import encode_diffs

logger = get_logger(__name__)


class AuditManager:
    """Orchestrates diffing, identity, summaries and blame for one transaction at a time."""

    def __init__(
        self,
        configuration: AuditConfiguration,
        metadata: IMetadataProvider,
        sink: IAuditSink,
        *,
        normalizer: ValueNormalizer | None = None,
        blame_resolver: BlameResolver | None = None,
        blame_context_provider: Callable[[], BlameContext] = get_blame_context,
    ) -> None:
        self.configuration = configuration
        self.metadata = metadata
        self.sink = sink
        self.normalizer = normalizer or ValueNormalizer()
        self.identity_resolver = IdentityResolver(metadata, self.normalizer)
        self.summarizer = EntitySummarizer(metadata, self.identity_resolver)
        self.diff_engine = DiffEngine(
            metadata, configuration, self.normalizer, self.summarizer
        )
        self.blame_resolver = blame_resolver or BlameResolver()
        self._blame_context_provider = blame_context_provider

    def create_transaction(self, snapshot: ITransactionalSnapshot) -> AuditTransaction:
        """Return a new, empty transaction bound to ``snapshot``."""
        return AuditTransaction(
            snapshot, self.metadata, self.configuration, self.identity_resolver
        )

    def process(self, transaction: AuditTransaction) -> list[AuditPayload]:
        """Assemble every payload of ``transaction`` and pass each to the sink.

        Returns:
            The payloads handed to the sink, in dispatch order.
        """
        transaction.mark_consumed()
        with TracedOperation(
            "flushaudit.manager.process",
            {"flushaudit.transaction_hash": transaction.transaction_hash},
        ):
            payloads = self.assemble(transaction)
            for payload in payloads:
                self.notify(payload)
        logger.debug(
            "Dispatched %d audit payloads for transaction %s",
            len(payloads),
            transaction.transaction_hash,
        )
        return payloads

    def assemble(self, transaction: AuditTransaction) -> list[AuditPayload]:
        """Build payloads in order: insertions, updates, associations, dissociations, deletions."""
        context = self._blame_context_provider()
        blame = self.blame_resolver.blame(context.operation, context.actor)
        transaction_hash = transaction.transaction_hash
        snapshot = transaction.snapshot

        payloads: list[AuditPayload] = []
        for record in transaction.inserted:
            changeset = merge_changesets(record.changeset, snapshot.changeset(record.entity))
            payloads.append(self.insert(Insert(record.entity, changeset), transaction_hash, blame))
        for record in transaction.updated:
            changeset = merge_changesets(record.changeset, snapshot.changeset(record.entity))
            payload = self.update(Update(record.entity, changeset), transaction_hash, blame)
            if payload is not None:
                payloads.append(payload)
        for record in transaction.associated:
            payloads.append(self.associate(record, transaction_hash, blame))
        for record in transaction.dissociated:
            payloads.append(self.dissociate(record, transaction_hash, blame))
        for record in transaction.removed:
            payloads.append(self.remove(record, transaction_hash, blame))
        return payloads

    def insert(self, record: Insert, transaction_hash: str, blame: Blame) -> AuditPayload:
        return self._payload(
            AuditAction.INSERT,
            record.entity,
            self.diff_engine.diff(record.entity, record.changeset),
            self._object_id(record.entity),
            transaction_hash,
            blame,
        )

    def update(self, record: Update, transaction_hash: str, blame: Blame) -> AuditPayload | None:
        """Update payload, or None when no audited field actually changed."""
        diff = self.diff_engine.diff(record.entity, record.changeset)
        if not diff:
            return None
        return self._payload(
            AuditAction.UPDATE,
            record.entity,
            diff,
            self._object_id(record.entity),
            transaction_hash,
            blame,
        )

    def remove(self, record: Remove, transaction_hash: str, blame: Blame) -> AuditPayload:
        return self._payload(
            AuditAction.REMOVE,
            record.entity,
            self.summarizer.summarize(record.entity, record.identity),
            str(record.identity),
            transaction_hash,
            blame,
        )

    def associate(self, record: Associate, transaction_hash: str, blame: Blame) -> AuditPayload:
        return self._link_payload(
            AuditAction.ASSOCIATE,
            record.source,
            record.target,
            None,
            record.relation,
            transaction_hash,
            blame,
        )

    def dissociate(self, record: Dissociate, transaction_hash: str, blame: Blame) -> AuditPayload:
        return self._link_payload(
            AuditAction.DISSOCIATE,
            record.source,
            record.target,
            record.identity,
            record.relation,
            transaction_hash,
            blame,
        )

    def notify(self, payload: AuditPayload) -> None:
        """Hand one payload to the sink."""
        self.sink.write(payload)

    def _link_payload(
        self,
        action: AuditAction,
        source: Any,
        target: Any,
        target_id: Any,
        relation: RelationDescriptor,
        transaction_hash: str,
        blame: Blame,
    ) -> AuditPayload:
        diff: dict[str, Any] = {
            "source": self.summarizer.summarize(source),
            "target": self.summarizer.summarize(target, target_id),
        }
        table = None
        if relation.join_table:
            owner_table = self.metadata.table(type(source))
            table = TableInfo(relation.join_table, relation.join_table_schema or owner_table.schema)
            diff["table"] = relation.join_table
        return self._payload(
            action,
            source,
            diff,
            self._object_id(source),
            transaction_hash,
            blame,
            table=table,
        )

    def _payload(
        self,
        action: AuditAction,
        entity: Any,
        diff: Any,
        object_id: str,
        transaction_hash: str,
        blame: Blame,
        table: TableInfo | None = None,
    ) -> AuditPayload:
        entity_type = type(entity)
        table = table or self.metadata.table(entity_type)
        return AuditPayload(
            id=generate_cuid(),
            entity=self.metadata.entity_name(entity_type),
            table=table.qualified_name,
            type=action,
            object_id=object_id,
            discriminator=self._discriminator(entity_type),
            transaction_hash=transaction_hash,
            diffs=encode_diffs(diff),
            blame_id=blame.user_id,
            blame_user=blame.username,
            blame_user_fqdn=blame.user_fqdn,
            blame_user_firewall=blame.user_firewall,
            ip=blame.client_ip,
            created_at=now_in(self.configuration.timezone),
        )

    def _discriminator(self, entity_type: type) -> str | None:
        if self.metadata.inheritance_mode(entity_type) is InheritanceMode.SINGLE_TABLE:
            return self.metadata.entity_name(entity_type)
        return None

    def _object_id(self, entity: Any) -> str:
        identity = self.identity_resolver.identity(entity)
        if identity is None:
            raise IdentityResolutionException(self.metadata.entity_name(entity))
        return str(identity)
