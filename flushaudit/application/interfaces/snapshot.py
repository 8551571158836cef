"""Transactional snapshot port: pending mutations of one flush."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from flushaudit.domain.records import Changeset, RelationDescriptor


@dataclass(frozen=True)
class CollectionUpdate:
    """A collection whose members changed: who owns it, through which relation, and the diff."""

    owner: Any
    relation: RelationDescriptor
    inserted: Sequence[Any] = field(default_factory=tuple)
    removed: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class CollectionDeletion:
    """A collection cleared as a whole; every remaining member is dissociated."""

    owner: Any
    relation: RelationDescriptor
    members: Sequence[Any] = field(default_factory=tuple)


class ITransactionalSnapshot(Protocol):
    """Protocol for a unit of work's pending changes (lists in native order)."""

    def scheduled_insertions(self) -> Sequence[Any]:
        """Entities scheduled for insertion."""

    def scheduled_updates(self) -> Sequence[Any]:
        """Entities scheduled for update."""

    def scheduled_deletions(self) -> Sequence[Any]:
        """Entities scheduled for deletion."""

    def scheduled_collection_updates(self) -> Sequence[CollectionUpdate]:
        """Collections with inserted and/or removed members."""

    def scheduled_collection_deletions(self) -> Sequence[CollectionDeletion]:
        """Collections cleared as a whole."""

    def changeset(self, entity: Any) -> Changeset:
        """Current changeset of an entity (may grow until the flush completes)."""
