"""Enumerations for flush auditing (actions, type categories, inheritance)."""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditAction(_ValuesMixin, str, Enum):
    """Kind of mutation an audit payload records."""

    INSERT = "insert"
    UPDATE = "update"
    REMOVE = "remove"
    ASSOCIATE = "associate"
    DISSOCIATE = "dissociate"


class SemanticType(_ValuesMixin, str, Enum):
    """Closed set of column type categories the value normalizer handles."""

    BIGINT = "bigint"
    INTEGER = "integer"
    SMALLINT = "smallint"
    DECIMAL = "decimal"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    INTERVAL = "interval"
    UUID = "uuid"
    ENUM = "enum"
    JSON = "json"
    BINARY = "binary"
    CUSTOM = "custom"


class InheritanceMode(_ValuesMixin, str, Enum):
    """How an entity hierarchy maps onto tables."""

    NONE = "none"
    SINGLE_TABLE = "single_table"
    JOINED = "joined"
