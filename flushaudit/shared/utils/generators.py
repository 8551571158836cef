"""ID and value generators (payload ids, transaction hashes)."""

import hashlib

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_transaction_hash() -> str:
    """Return a fresh 40-char hex identifier for one flushed transaction."""
    return hashlib.sha1(f"tid{generate_cuid()}".encode()).hexdigest()
