"""Mutation records, blame and audit payload value objects.

Mutation records are what one collection pass produces from a flush; the
audit payload is what a sink receives. All are immutable once built.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from flushaudit.domain.enums import AuditAction

# field name -> (old, new), raw values as the snapshot saw them
Changeset = dict[str, tuple[Any, Any]]


def merge_changesets(provisional: Mapping[str, Any], late: Mapping[str, Any]) -> Changeset:
    """Merge changes recorded after collection into the provisional changeset.

    Last write wins on field name: an entry present in ``late`` replaces the
    provisional one; fields only in ``provisional`` are kept.
    """
    merged: Changeset = {name: tuple(pair) for name, pair in provisional.items()}
    for name, pair in late.items():
        merged[name] = tuple(pair)
    return merged


@dataclass(frozen=True)
class RelationDescriptor:
    """Describes the relation an associate/dissociate went through."""

    name: str
    join_table: str | None = None
    join_table_schema: str | None = None


@dataclass(frozen=True)
class Insert:
    entity: Any
    changeset: Changeset


@dataclass(frozen=True)
class Update:
    entity: Any
    changeset: Changeset


@dataclass(frozen=True)
class Remove:
    entity: Any
    identity: Any


@dataclass(frozen=True)
class Associate:
    source: Any
    target: Any
    relation: RelationDescriptor


@dataclass(frozen=True)
class Dissociate:
    source: Any
    target: Any
    identity: Any
    relation: RelationDescriptor


MutationRecord = Insert | Update | Remove | Associate | Dissociate


@dataclass(frozen=True)
class Blame:
    """Who performed an operation and from where. Every field is nullable."""

    user_id: str | None = None
    username: str | None = None
    client_ip: str | None = None
    user_fqdn: str | None = None
    user_firewall: str | None = None


@dataclass(frozen=True)
class AuditPayload:
    """One audit record, in the layout sinks persist.

    ``diffs`` is already JSON-encoded and ``object_id`` already a string;
    sinks must treat both as opaque.
    """

    FIELDS = (
        "id",
        "entity",
        "table",
        "type",
        "object_id",
        "discriminator",
        "transaction_hash",
        "diffs",
        "blame_id",
        "blame_user",
        "blame_user_fqdn",
        "blame_user_firewall",
        "ip",
        "created_at",
    )
    # Columns of the persisted audit record (entity/table select the destination)
    ROW_FIELDS = FIELDS[:1] + FIELDS[3:]

    id: str
    entity: str
    table: str
    type: AuditAction
    object_id: str
    discriminator: str | None
    transaction_hash: str
    diffs: str
    created_at: datetime
    blame_id: str | None = None
    blame_user: str | None = None
    blame_user_fqdn: str | None = None
    blame_user_firewall: str | None = None
    ip: str | None = None

    @property
    def schema(self) -> str | None:
        """Schema part of ``table``, if qualified."""
        schema = self.table.rpartition(".")[0]
        return schema or None

    @property
    def table_name(self) -> str:
        """``table`` without its schema qualifier."""
        return self.table.rpartition(".")[2]

    def decoded_diffs(self) -> Any:
        """Return ``diffs`` decoded from JSON."""
        return json.loads(self.diffs)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict of all fields (timestamp as ISO 8601)."""
        data = {name: getattr(self, name) for name in self.FIELDS}
        data["type"] = self.type.value
        data["created_at"] = self.created_at.isoformat()
        return data

    def as_row(self) -> dict[str, Any]:
        """Column values for the audit table (diffs decoded for a JSON column)."""
        row = {name: getattr(self, name) for name in self.ROW_FIELDS}
        row["type"] = self.type.value
        row["diffs"] = self.decoded_diffs()
        return row
