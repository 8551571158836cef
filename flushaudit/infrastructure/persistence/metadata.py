"""SQLAlchemy metadata provider: mapper reflection for the audit core.

Field names are mapped attribute keys (not column names). A primary key
column that is the sole local column of a many-to-one relationship is
reported as that relationship (identity through a foreign entity), so the
identity resolver reads the related entity's identifier. The column
attribute itself stays available through foreign_identifier_column() for
objects whose related entity is not loaded.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Dialect
from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper, RelationshipDirection, RelationshipProperty

from flushaudit.application.interfaces.metadata import AssociationInfo, FieldType, TableInfo
from flushaudit.domain.enums import InheritanceMode, SemanticType
from flushaudit.domain.exceptions import MetadataException
from flushaudit.shared.utils.naming import qualified_name

# Order matters: subclasses before their bases (BigInteger < Integer, Float < Numeric,
# Enum < String, Text < String, Interval < TypeDecorator).
_TYPE_CATEGORIES: tuple[tuple[type, SemanticType], ...] = (
    (sqltypes.Interval, SemanticType.INTERVAL),
    (sqltypes.TypeDecorator, SemanticType.CUSTOM),
    (sqltypes.BigInteger, SemanticType.BIGINT),
    (sqltypes.SmallInteger, SemanticType.SMALLINT),
    (sqltypes.Integer, SemanticType.INTEGER),
    (sqltypes.Float, SemanticType.FLOAT),
    (sqltypes.Numeric, SemanticType.DECIMAL),
    (sqltypes.Boolean, SemanticType.BOOLEAN),
    (sqltypes.Enum, SemanticType.ENUM),
    (sqltypes.Text, SemanticType.TEXT),
    (sqltypes.String, SemanticType.STRING),
    (sqltypes.DateTime, SemanticType.DATETIME),
    (sqltypes.Date, SemanticType.DATE),
    (sqltypes.Time, SemanticType.TIME),
    (sqltypes.Uuid, SemanticType.UUID),
    (sqltypes.JSON, SemanticType.JSON),
    (sqltypes.LargeBinary, SemanticType.BINARY),
    (sqltypes.VARBINARY, SemanticType.BINARY),
    (sqltypes.BINARY, SemanticType.BINARY),
)


def semantic_type_of(type_engine: sqltypes.TypeEngine) -> SemanticType:
    """Map a SQLAlchemy column type onto its semantic category."""
    for type_class, semantic in _TYPE_CATEGORIES:
        if isinstance(type_engine, type_class):
            return semantic
    return SemanticType.CUSTOM


class SQLAlchemyMetadataProvider:
    """IMetadataProvider over SQLAlchemy mappers."""

    def __init__(self, dialect: Dialect | None = None) -> None:
        self.dialect = dialect or DefaultDialect()
        self._field_types: dict[tuple[type, str], FieldType] = {}
        self._identifiers: dict[type, str] = {}
        self._foreign_columns: dict[type, str] = {}

    def entity_name(self, entity_or_type: Any) -> str:
        return qualified_name(entity_or_type)

    def identifier_field(self, entity_type: type) -> str:
        try:
            return self._identifiers[entity_type]
        except KeyError:
            pass
        mapper = self._mapper(entity_type)
        pk_columns = mapper.primary_key
        if len(pk_columns) != 1:
            raise MetadataException(
                f"Composite identifier ({len(pk_columns)} columns) is not supported",
                entity=self.entity_name(entity_type),
            )
        column = pk_columns[0]
        key = mapper.get_property_by_column(column).key
        for relationship in mapper.relationships:
            if (
                relationship.direction is RelationshipDirection.MANYTOONE
                and set(relationship.local_columns) == {column}
            ):
                self._foreign_columns[entity_type] = key
                key = relationship.key
                break
        self._identifiers[entity_type] = key
        return key

    def foreign_identifier_column(self, entity_type: type, field: str) -> str | None:
        if field != self.identifier_field(entity_type):
            return None
        return self._foreign_columns.get(entity_type)

    def has_field(self, entity_type: type, field: str) -> bool:
        return field in self._mapper(entity_type).column_attrs

    def field_type(self, entity_type: type, field: str) -> FieldType:
        cache_key = (entity_type, field)
        cached = self._field_types.get(cache_key)
        if cached is not None:
            return cached
        mapper = self._mapper(entity_type)
        if field not in mapper.column_attrs:
            raise MetadataException(
                "Unknown field", entity=self.entity_name(entity_type), field=field
            )
        type_engine = mapper.column_attrs[field].columns[0].type
        semantic = semantic_type_of(type_engine)
        to_storage = None
        if semantic in (SemanticType.ENUM, SemanticType.CUSTOM):
            to_storage = self._bind_processor(type_engine)
        field_type = FieldType(semantic, to_storage)
        self._field_types[cache_key] = field_type
        return field_type

    def is_embedded(self, entity_type: type, field: str) -> bool:
        return field in self._mapper(entity_type).composites

    def association(self, entity_type: type, field: str) -> AssociationInfo | None:
        relationship = self._relationship(entity_type, field)
        if relationship is None:
            return None
        return AssociationInfo(
            single_valued=not relationship.uselist,
            target=relationship.mapper.class_,
        )

    def association_target(self, entity_type: type, field: str) -> type:
        relationship = self._relationship(entity_type, field)
        if relationship is None:
            raise MetadataException(
                "Not an association", entity=self.entity_name(entity_type), field=field
            )
        return relationship.mapper.class_

    def table(self, entity_type: type) -> TableInfo:
        local_table = self._mapper(entity_type).local_table
        name = getattr(local_table, "name", None)
        if name is None:
            raise MetadataException(
                "Mapped selectable has no table name", entity=self.entity_name(entity_type)
            )
        return TableInfo(name=name, schema=getattr(local_table, "schema", None))

    def inheritance_mode(self, entity_type: type) -> InheritanceMode:
        mapper = self._mapper(entity_type)
        hierarchy = list(mapper.base_mapper.self_and_descendants)
        if any(m.single for m in hierarchy):
            return InheritanceMode.SINGLE_TABLE
        if any(m.concrete for m in hierarchy):
            return InheritanceMode.NONE
        if len(hierarchy) > 1:
            return InheritanceMode.JOINED
        return InheritanceMode.NONE

    def read(self, entity: Any, field: str) -> Any:
        return getattr(entity, field)

    def initialize(self, entity: Any) -> None:
        """Load unloaded column attributes of a persistent entity."""
        state = inspect(entity)
        if not state.has_identity or state.session is None:
            return
        column_keys = set(state.mapper.column_attrs.keys())
        for key in sorted(state.unloaded & column_keys):
            getattr(entity, key)

    def _mapper(self, entity_type: type) -> Mapper:
        try:
            mapper = inspect(entity_type)
        except NoInspectionAvailable as e:
            raise MetadataException(
                "Not a mapped class", entity=self.entity_name(entity_type)
            ) from e
        if not isinstance(mapper, Mapper):
            raise MetadataException("Not a mapped class", entity=self.entity_name(entity_type))
        return mapper

    def _relationship(self, entity_type: type, field: str) -> RelationshipProperty | None:
        relationships = self._mapper(entity_type).relationships
        if field not in relationships:
            return None
        return relationships[field]

    def _bind_processor(self, type_engine: sqltypes.TypeEngine) -> Callable[[Any], Any] | None:
        return type_engine.bind_processor(self.dialect)
