"""Core: settings, constants and the audit eligibility configuration."""

from flushaudit.core.config import (
    AuditConfiguration,
    AuditSettings,
    EntityAuditOptions,
    get_settings,
)

__all__ = [
    "AuditConfiguration",
    "AuditSettings",
    "EntityAuditOptions",
    "get_settings",
]
