"""Shared utilities: timestamps, generators, naming, serialization."""

from flushaudit.shared.utils.datetime import now_in
from flushaudit.shared.utils.generators import generate_cuid, generate_transaction_hash
from flushaudit.shared.utils.naming import qualified_name
from flushaudit.shared.utils.serialization import encode_diffs

__all__ = [
    "generate_cuid",
    "generate_transaction_hash",
    "now_in",
    "encode_diffs",
    "qualified_name",
]
