"""Audit configuration (settings and eligibility).

Single source of truth for audit configuration. Uses pydantic-settings
with .env support; every field can be set through an ``AUDIT_``-prefixed
environment variable (``AUDIT_ENTITIES`` takes JSON). The timezone is
validated at load time.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flushaudit.shared.utils.naming import qualified_name


class EntityAuditOptions(BaseModel):
    """Per-entity audit options."""

    enabled: bool = True
    ignored_columns: list[str] = Field(default_factory=list)


class AuditSettings(BaseSettings):
    """Audit settings loaded from environment and .env.

    ``entities`` maps an entity name (module-qualified class name) to its
    options; entities not listed are never audited.
    """

    enabled: bool = True
    debug: bool = False

    # Destination audit table = <schema>.<table_prefix><table><table_suffix>
    table_prefix: str = ""
    table_suffix: str = "_audit"
    # IANA timezone used for created_at
    timezone: str = "UTC"

    ignored_columns: list[str] = Field(default_factory=list)
    entities: dict[str, EntityAuditOptions] = Field(default_factory=dict)

    # Redis publisher sink
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_channel_prefix: str = "audit"

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_timezone_and_table_affixes(self) -> "AuditSettings":
        """Reject unknown timezones and a prefix/suffix pair that maps onto the audited table."""
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone!r}") from e
        if not self.table_prefix and not self.table_suffix:
            raise ValueError(
                "table_prefix and table_suffix cannot both be empty: audit tables "
                "would share the audited tables' names."
            )
        return self


@lru_cache
def get_settings() -> AuditSettings:
    """Return a cached settings instance."""
    return AuditSettings()


class AuditConfiguration:
    """Eligibility predicate and naming rules built from AuditSettings.

    Entity options are copied at construction so enable_audit_for /
    disable_audit_for do not mutate the shared settings object.
    """

    def __init__(
        self,
        settings: AuditSettings | None = None,
        name_resolver: Callable[[Any], str] = qualified_name,
    ) -> None:
        self.settings = settings or get_settings()
        self._name_of = name_resolver
        self._entities: dict[str, EntityAuditOptions] = {
            name: options.model_copy(deep=True)
            for name, options in self.settings.entities.items()
        }

    @property
    def timezone(self) -> str:
        return self.settings.timezone

    @property
    def entities(self) -> dict[str, EntityAuditOptions]:
        return dict(self._entities)

    def is_auditable(self, entity_or_type: Any) -> bool:
        """True if the entity is configured, whether or not it is enabled."""
        return self._name_of(entity_or_type) in self._entities

    def is_audited(self, entity_or_type: Any) -> bool:
        """True if auditing is on and the entity is configured and enabled."""
        if not self.settings.enabled:
            return False
        options = self._entities.get(self._name_of(entity_or_type))
        return options is not None and options.enabled

    def is_audited_field(self, entity_or_type: Any, field: str) -> bool:
        """True if ``field`` of a configured entity is not ignored globally or per entity."""
        if field in self.settings.ignored_columns:
            return False
        options = self._entities.get(self._name_of(entity_or_type))
        if options is None:
            return False
        return field not in options.ignored_columns

    def enable_audit_for(self, entity_name: str) -> None:
        """Enable auditing of a configured entity."""
        self._options_for(entity_name).enabled = True

    def disable_audit_for(self, entity_name: str) -> None:
        """Disable auditing of a configured entity."""
        self._options_for(entity_name).enabled = False

    def audit_table_name(self, table: str, schema: str | None = None) -> str:
        """Return the schema-qualified audit table name for a source table."""
        name = f"{self.settings.table_prefix}{table}{self.settings.table_suffix}"
        return f"{schema}.{name}" if schema else name

    def _options_for(self, entity_name: str) -> EntityAuditOptions:
        try:
            return self._entities[entity_name]
        except KeyError:
            raise ValueError(f"{entity_name} is not configured for auditing") from None
