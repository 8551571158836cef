"""Session snapshot: the pending mutations of a SQLAlchemy session flush."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Table, inspect
from sqlalchemy.orm import RelationshipProperty, Session

from flushaudit.application.interfaces.snapshot import CollectionDeletion, CollectionUpdate
from flushaudit.domain.records import Changeset, RelationDescriptor


def _first(values: Sequence[Any]) -> Any:
    return values[0] if values else None


def relation_descriptor(relationship: RelationshipProperty) -> RelationDescriptor:
    """Describe a relationship; many-to-many ones carry their association table."""
    secondary = relationship.secondary
    if isinstance(secondary, Table):
        return RelationDescriptor(
            name=relationship.key,
            join_table=secondary.name,
            join_table_schema=secondary.schema,
        )
    return RelationDescriptor(name=relationship.key)


class SessionSnapshot:
    """ITransactionalSnapshot over ``session.new`` / ``dirty`` / ``deleted``.

    Read it from ``before_flush`` for the scheduled lists. ``changeset()``
    stays valid through ``after_flush`` (attribute history is reset only
    after that hook), and by then it also holds generated primary keys.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def scheduled_insertions(self) -> list[Any]:
        return list(self.session.new)

    def scheduled_updates(self) -> list[Any]:
        orphans = {id(obj) for obj in self._orphans()}
        return [obj for obj in self._dirty() if id(obj) not in orphans]

    def scheduled_deletions(self) -> list[Any]:
        """Explicit deletions, then members the flush will delete as orphans."""
        deleted = self.session.deleted
        return [*deleted, *(obj for obj in self._orphans() if obj not in deleted)]

    def scheduled_collection_updates(self) -> list[CollectionUpdate]:
        updates: list[CollectionUpdate] = []
        for owner in [*self.scheduled_insertions(), *self.scheduled_updates()]:
            state = inspect(owner)
            for relationship in state.mapper.relationships:
                if not relationship.uselist or relationship.viewonly:
                    continue
                history = state.attrs[relationship.key].history
                if not (history.added or history.deleted):
                    continue
                updates.append(
                    CollectionUpdate(
                        owner=owner,
                        relation=relation_descriptor(relationship),
                        inserted=tuple(history.added),
                        removed=tuple(history.deleted),
                    )
                )
        return updates

    def scheduled_collection_deletions(self) -> list[CollectionDeletion]:
        """Many-to-many collections whose association rows go away with a deleted owner."""
        deletions: list[CollectionDeletion] = []
        for owner in self.scheduled_deletions():
            state = inspect(owner)
            for relationship in state.mapper.relationships:
                if not relationship.uselist or relationship.viewonly:
                    continue
                if relationship.secondary is None:
                    continue
                members = tuple(getattr(owner, relationship.key))
                if members:
                    deletions.append(
                        CollectionDeletion(
                            owner=owner,
                            relation=relation_descriptor(relationship),
                            members=members,
                        )
                    )
        return deletions

    def _dirty(self) -> list[Any]:
        # identity map order keeps this deterministic; session.dirty is a set
        dirty = self.session.dirty
        return [obj for obj in self.session.identity_map.values() if obj in dirty]

    def _orphans(self) -> list[Any]:
        """Persistent members removed from a delete-orphan relationship and not re-parented.

        SQLAlchemy resolves these deletions during the flush, so they are
        not in ``session.deleted`` yet.
        """
        removed: list[Any] = []
        reparented: set[int] = set()
        for owner in [*self.session.new, *self._dirty()]:
            state = inspect(owner)
            for relationship in state.mapper.relationships:
                if not relationship.cascade.delete_orphan:
                    continue
                history = state.attrs[relationship.key].history
                reparented.update(id(member) for member in history.added if member is not None)
                removed.extend(member for member in history.deleted if member is not None)

        orphans: list[Any] = []
        seen: set[int] = set()
        for member in removed:
            if id(member) in reparented or id(member) in seen:
                continue
            seen.add(id(member))
            if inspect(member).persistent:
                orphans.append(member)
        return orphans

    def changeset(self, entity: Any) -> Changeset:
        state = inspect(entity)
        mapper = state.mapper
        changes: Changeset = {}
        for prop in mapper.column_attrs:
            history = state.attrs[prop.key].history
            if history.added or history.deleted:
                changes[prop.key] = (_first(history.deleted), _first(history.added))
        for relationship in mapper.relationships:
            if relationship.uselist:
                continue
            history = state.attrs[relationship.key].history
            if history.added or history.deleted:
                changes[relationship.key] = (_first(history.deleted), _first(history.added))
        return changes
