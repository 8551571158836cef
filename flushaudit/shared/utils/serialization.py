"""JSON encoding of audit diffs.

Normalized values may contain Decimal (in-memory form of numeric columns);
those are written as strings. Anything else json cannot encode is a
SerializationException: a diff field is never dropped silently.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

from flushaudit.domain.exceptions import SerializationException


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_diffs(diffs: Any) -> str:
    """Encode a field diff / summary structure as a JSON string."""
    try:
        return json.dumps(diffs, default=_default)
    except (TypeError, ValueError) as e:
        raise SerializationException(f"Cannot encode audit diffs: {e}") from e
