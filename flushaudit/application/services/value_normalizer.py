"""Value normalizer: raw field value -> diff-comparable, JSON-serializable value.

Numeric and boolean types normalize to their in-memory form so storage
format drift (trailing zeros, 0/1 vs True/False) never shows up as a diff.
Every other type normalizes to the form the storage engine would write, so
two values compare the way they would be persisted.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from flushaudit.application.interfaces.metadata import FieldType
from flushaudit.domain.enums import SemanticType
from flushaudit.domain.exceptions import MetadataException, SerializationException

_JSON_SCALARS = (str, int, float, bool, Decimal)

_NUMERIC_IN_MEMORY = frozenset(
    {SemanticType.DECIMAL, SemanticType.FLOAT, SemanticType.BOOLEAN}
)
_TEMPORAL = frozenset({SemanticType.DATE, SemanticType.DATETIME, SemanticType.TIME})
_TEXTUAL = frozenset({SemanticType.STRING, SemanticType.TEXT, SemanticType.UUID})


class ValueNormalizer:
    """Normalizes raw values by semantic type category."""

    def normalize(self, field_type: FieldType, value: Any, field: str | None = None) -> Any:
        """Return the normalized form of ``value``; None stays None.

        Raises:
            SerializationException: value cannot be converted for its type.
            MetadataException: semantic type is not handled.
        """
        if value is None:
            return None
        semantic = field_type.semantic
        try:
            if semantic is SemanticType.BIGINT:
                return str(value)
            if semantic in (SemanticType.INTEGER, SemanticType.SMALLINT):
                return int(value)
            if semantic in _NUMERIC_IN_MEMORY:
                return self._in_memory(semantic, value)
            if semantic in _TEMPORAL:
                return self._temporal(value)
            if semantic in _TEXTUAL:
                return str(value)
            if semantic is SemanticType.INTERVAL:
                return value.total_seconds() if isinstance(value, timedelta) else value
            if semantic is SemanticType.BINARY:
                return bytes(value).hex()
            if semantic is SemanticType.JSON:
                return self._json_safe(value, field)
            if semantic in (SemanticType.ENUM, SemanticType.CUSTOM):
                if field_type.to_storage is not None:
                    value = field_type.to_storage(value)
                return self._json_safe(value, field)
        except SerializationException:
            raise
        except (TypeError, ValueError, InvalidOperation, AttributeError) as e:
            raise SerializationException(
                f"Cannot normalize {type(value).__name__} value as {semantic.value}: {e}",
                field=field,
            ) from e
        raise MetadataException(f"Unhandled semantic type: {semantic!r}", field=field)

    @staticmethod
    def _in_memory(semantic: SemanticType, value: Any) -> Any:
        if semantic is SemanticType.DECIMAL:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        if semantic is SemanticType.FLOAT:
            return float(value)
        return bool(value)

    @staticmethod
    def _temporal(value: Any) -> str:
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, (date, time)):
            return value.isoformat()
        return str(value)

    def _json_safe(self, value: Any, field: str | None) -> Any:
        """Coerce storage-level values json can encode; reject anything else."""
        if value is None or isinstance(value, _JSON_SCALARS):
            return value
        if isinstance(value, enum.Enum):
            return value.name
        if isinstance(value, (datetime, date, time)):
            return self._temporal(value)
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).hex()
        if isinstance(value, dict):
            return {str(k): self._json_safe(v, field) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._json_safe(v, field) for v in value]
        raise SerializationException(
            f"Value of type {type(value).__name__} is not JSON serializable",
            field=field,
        )
