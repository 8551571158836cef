"""Type naming helpers."""

from typing import Any


def qualified_name(entity_or_type: Any) -> str:
    """Return ``module.QualName`` of a class, or of an instance's class."""
    cls = entity_or_type if isinstance(entity_or_type, type) else type(entity_or_type)
    return f"{cls.__module__}.{cls.__qualname__}"
