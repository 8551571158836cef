"""Metadata provider port: per-entity-type reflection the audit core consumes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from flushaudit.domain.enums import InheritanceMode, SemanticType


@dataclass(frozen=True)
class FieldType:
    """Semantic category of a field.

    ``to_storage`` converts a value to what the storage engine would write;
    the normalizer uses it for enum and custom types.
    """

    semantic: SemanticType
    to_storage: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class AssociationInfo:
    """A relation field: single-valued (many-to-one / one-to-one) or a collection."""

    single_valued: bool
    target: type | None = None


@dataclass(frozen=True)
class TableInfo:
    name: str
    schema: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name


class IMetadataProvider(Protocol):
    """Protocol for entity metadata reflection (ORM mapping adapter)."""

    def entity_name(self, entity_or_type: Any) -> str:
        """Fully-qualified type name of an entity or entity class."""

    def identifier_field(self, entity_type: type) -> str:
        """Name of the single identifier field; MetadataException if composite."""

    def foreign_identifier_column(self, entity_type: type, field: str) -> str | None:
        """Plain field holding the related identifier behind a foreign-derived
        identifier ``field``, or None when there is no such field."""

    def has_field(self, entity_type: type, field: str) -> bool:
        """True if ``field`` is a plain (column) field."""

    def field_type(self, entity_type: type, field: str) -> FieldType:
        """Semantic type of a plain field; MetadataException if unknown."""

    def is_embedded(self, entity_type: type, field: str) -> bool:
        """True if ``field`` holds an embedded value object."""

    def association(self, entity_type: type, field: str) -> AssociationInfo | None:
        """Association info of a relation field, or None if not a relation."""

    def association_target(self, entity_type: type, field: str) -> type:
        """Entity type a relation field points to; MetadataException if not a relation."""

    def table(self, entity_type: type) -> TableInfo:
        """Table (and schema) the entity type is stored in."""

    def inheritance_mode(self, entity_type: type) -> InheritanceMode:
        """Inheritance mapping of the entity type."""

    def read(self, entity: Any, field: str) -> Any:
        """Raw value of a field on an entity instance."""

    def initialize(self, entity: Any) -> None:
        """Materialize a partially loaded entity (no-op if fully loaded)."""
