"""
Timezone-aware timestamps for audit payloads.

Payloads are stamped in the configured operation timezone. Use now_in()
instead of datetime.now() so every payload carries tzinfo.
"""

from datetime import datetime
from zoneinfo import ZoneInfo


def now_in(timezone_name: str) -> datetime:
    """
    Return the current datetime in the named IANA timezone.

    Args:
        timezone_name: e.g. "UTC" or "Europe/Paris"

    Returns:
        Timezone-aware datetime
    """
    return datetime.now(ZoneInfo(timezone_name))
