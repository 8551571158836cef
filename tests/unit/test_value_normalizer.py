"""Tests for ValueNormalizer: dispatch by semantic type category."""

import enum
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from flushaudit.application.interfaces.metadata import FieldType
from flushaudit.application.services import ValueNormalizer
from flushaudit.domain.enums import SemanticType
from flushaudit.domain.exceptions import SerializationException


class Color(enum.Enum):
    RED = "r"
    BLUE = "b"


def _t(semantic: SemanticType, to_storage=None) -> FieldType:
    return FieldType(semantic, to_storage)


class TestNumericTypes:
    """Big integers become strings; integers, decimals, floats and booleans stay in memory form."""

    def test_bigint_becomes_string(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.BIGINT), 2**63 - 1) == "9223372036854775807"

    def test_integer_and_smallint_become_int(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.INTEGER), "12") == 12
        assert normalizer.normalize(_t(SemanticType.SMALLINT), 3) == 3

    def test_decimal_keeps_value_equality_across_trailing_zeros(
        self, normalizer: ValueNormalizer
    ) -> None:
        old = normalizer.normalize(_t(SemanticType.DECIMAL), Decimal("100.0"))
        new = normalizer.normalize(_t(SemanticType.DECIMAL), "100.00")
        assert old == new
        assert isinstance(new, Decimal)

    def test_float(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.FLOAT), "1.5") == 1.5

    def test_boolean_from_storage_integer(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.BOOLEAN), 1) is True
        assert normalizer.normalize(_t(SemanticType.BOOLEAN), 0) is False


class TestStorageForms:
    """Temporal, textual and binary values normalize to their storage form."""

    def test_none_stays_none_for_every_type(self, normalizer: ValueNormalizer) -> None:
        for semantic in SemanticType:
            assert normalizer.normalize(_t(semantic), None) is None

    def test_datetime_date_time(self, normalizer: ValueNormalizer) -> None:
        dt = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        assert normalizer.normalize(_t(SemanticType.DATETIME), dt) == "2024-05-01 09:30:00+00:00"
        assert normalizer.normalize(_t(SemanticType.DATE), date(2024, 5, 1)) == "2024-05-01"
        assert normalizer.normalize(_t(SemanticType.TIME), time(9, 30)) == "09:30:00"

    def test_uuid_and_text(self, normalizer: ValueNormalizer) -> None:
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert normalizer.normalize(_t(SemanticType.UUID), value) == str(value)
        assert normalizer.normalize(_t(SemanticType.TEXT), 5) == "5"

    def test_interval_in_seconds(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.INTERVAL), timedelta(minutes=2)) == 120.0

    def test_binary_as_hex(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.BINARY), b"\x00\xff") == "00ff"

    def test_json_nested_values_made_safe(self, normalizer: ValueNormalizer) -> None:
        got = normalizer.normalize(
            _t(SemanticType.JSON), {"when": date(2024, 1, 2), "tags": ("a", Color.RED)}
        )
        assert got == {"when": "2024-01-02", "tags": ["a", "RED"]}


class TestEnumAndCustomTypes:
    """Enum and custom types go through the type's storage converter."""

    def test_enum_uses_storage_converter(self, normalizer: ValueNormalizer) -> None:
        field_type = _t(SemanticType.ENUM, lambda v: v.name if isinstance(v, Color) else v)
        assert normalizer.normalize(field_type, Color.BLUE) == "BLUE"

    def test_enum_without_converter_uses_member_name(self, normalizer: ValueNormalizer) -> None:
        assert normalizer.normalize(_t(SemanticType.ENUM), Color.RED) == "RED"

    def test_custom_converter_output_is_used(self, normalizer: ValueNormalizer) -> None:
        field_type = _t(SemanticType.CUSTOM, lambda v: f"<{v}>")
        assert normalizer.normalize(field_type, "x") == "<x>"

    def test_unserializable_custom_value_raises(self, normalizer: ValueNormalizer) -> None:
        with pytest.raises(SerializationException) as exc_info:
            normalizer.normalize(_t(SemanticType.CUSTOM), object(), field="payload")
        assert exc_info.value.error_code == "SERIALIZATION_ERROR"
        assert exc_info.value.details == {"field": "payload"}

    def test_conversion_error_raises_serialization_exception(
        self, normalizer: ValueNormalizer
    ) -> None:
        with pytest.raises(SerializationException):
            normalizer.normalize(_t(SemanticType.INTEGER), "not a number", field="qty")
