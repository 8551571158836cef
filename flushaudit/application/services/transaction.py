"""Audit transaction: the mutations of one flush, bucketed by kind.

A transaction is created at the start of a flush, populated by exactly one
collect() pass, consumed once by the audit manager and then discarded.
Each phase walks its snapshot list in reverse: the unit of work lists
dependents before their dependencies, and reversing restores logical
(creation) order in the emitted records.
"""

from __future__ import annotations

import threading
from typing import Any

from flushaudit.application.interfaces.metadata import IMetadataProvider
from flushaudit.application.interfaces.services import IEligibilityPredicate
from flushaudit.application.interfaces.snapshot import ITransactionalSnapshot
from flushaudit.application.services.identity_resolver import IdentityResolver
from flushaudit.domain.exceptions import (
    IdentityResolutionException,
    TransactionStateException,
)
from flushaudit.domain.records import Associate, Dissociate, Insert, Remove, Update
from flushaudit.shared.telemetry.logging import get_logger
from flushaudit.shared.telemetry.tracing import add_span_attributes, traced
from flushaudit.shared.utils.generators import generate_transaction_hash

logger = get_logger(__name__)


class AuditTransaction:
    """Collects audit-eligible mutations from a transactional snapshot."""

    def __init__(
        self,
        snapshot: ITransactionalSnapshot,
        metadata: IMetadataProvider,
        eligibility: IEligibilityPredicate,
        identity_resolver: IdentityResolver,
    ) -> None:
        self.snapshot = snapshot
        self.metadata = metadata
        self.eligibility = eligibility
        self.identity_resolver = identity_resolver

        self._hash: str | None = None
        self._hash_lock = threading.Lock()
        self._collected = False
        self._consumed = False

        self._inserted: list[Insert] = []
        self._updated: list[Update] = []
        self._removed: list[Remove] = []
        self._associated: list[Associate] = []
        self._dissociated: list[Dissociate] = []

    @property
    def transaction_hash(self) -> str:
        """Identifier shared by every payload of this transaction (generated once)."""
        if self._hash is None:
            with self._hash_lock:
                if self._hash is None:
                    self._hash = generate_transaction_hash()
        return self._hash

    @property
    def inserted(self) -> tuple[Insert, ...]:
        return tuple(self._inserted)

    @property
    def updated(self) -> tuple[Update, ...]:
        return tuple(self._updated)

    @property
    def removed(self) -> tuple[Remove, ...]:
        return tuple(self._removed)

    @property
    def associated(self) -> tuple[Associate, ...]:
        return tuple(self._associated)

    @property
    def dissociated(self) -> tuple[Dissociate, ...]:
        return tuple(self._dissociated)

    @property
    def is_empty(self) -> bool:
        return not (
            self._inserted
            or self._updated
            or self._removed
            or self._associated
            or self._dissociated
        )

    @traced("flushaudit.transaction.collect")
    def collect(self) -> None:
        """Run the five collection phases once, in fixed order.

        Raises:
            TransactionStateException: collect() was already called.
            IdentityResolutionException / MetadataException: an identity
                could not be resolved; nothing from this transaction is audited.
        """
        if self._collected:
            raise TransactionStateException("Audit transaction already collected")
        self._collected = True

        self.collect_scheduled_insertions()
        self.collect_scheduled_updates()
        self.collect_scheduled_deletions()
        self.collect_scheduled_collection_updates()
        self.collect_scheduled_collection_deletions()

        add_span_attributes(
            inserted=len(self._inserted),
            updated=len(self._updated),
            removed=len(self._removed),
            associated=len(self._associated),
            dissociated=len(self._dissociated),
        )
        logger.debug(
            "Collected %d insertions, %d updates, %d deletions, "
            "%d associations, %d dissociations",
            len(self._inserted),
            len(self._updated),
            len(self._removed),
            len(self._associated),
            len(self._dissociated),
        )

    def collect_scheduled_insertions(self) -> None:
        for entity in reversed(list(self.snapshot.scheduled_insertions())):
            if self.eligibility.is_audited(entity):
                self._inserted.append(Insert(entity, self.snapshot.changeset(entity)))

    def collect_scheduled_updates(self) -> None:
        for entity in reversed(list(self.snapshot.scheduled_updates())):
            if self.eligibility.is_audited(entity):
                self._updated.append(Update(entity, self.snapshot.changeset(entity)))

    def collect_scheduled_deletions(self) -> None:
        for entity in reversed(list(self.snapshot.scheduled_deletions())):
            if self.eligibility.is_audited(entity):
                # identity must be captured while the row still exists
                self.metadata.initialize(entity)
                self._removed.append(Remove(entity, self._require_identity(entity)))

    def collect_scheduled_collection_updates(self) -> None:
        for collection in reversed(list(self.snapshot.scheduled_collection_updates())):
            if not self.eligibility.is_audited(collection.owner):
                continue
            for member in collection.inserted:
                if self.eligibility.is_audited(member):
                    self._associated.append(
                        Associate(collection.owner, member, collection.relation)
                    )
            for member in collection.removed:
                if self.eligibility.is_audited(member):
                    self._dissociated.append(
                        Dissociate(
                            collection.owner,
                            member,
                            self._require_identity(member),
                            collection.relation,
                        )
                    )

    def collect_scheduled_collection_deletions(self) -> None:
        for collection in reversed(list(self.snapshot.scheduled_collection_deletions())):
            if not self.eligibility.is_audited(collection.owner):
                continue
            for member in collection.members:
                if self.eligibility.is_audited(member):
                    self._dissociated.append(
                        Dissociate(
                            collection.owner,
                            member,
                            self._require_identity(member),
                            collection.relation,
                        )
                    )

    def mark_consumed(self) -> None:
        """Record that the audit manager has processed this transaction."""
        if not self._collected:
            raise TransactionStateException("Audit transaction was never collected")
        if self._consumed:
            raise TransactionStateException("Audit transaction already processed")
        self._consumed = True

    def _require_identity(self, entity: Any) -> Any:
        identity = self.identity_resolver.identity(entity)
        if identity is None:
            raise IdentityResolutionException(self.metadata.entity_name(entity))
        return identity
