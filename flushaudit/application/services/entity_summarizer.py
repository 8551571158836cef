"""Entity summarizer: compact descriptor of a related or removed entity."""

from __future__ import annotations

from typing import Any

from flushaudit.application.interfaces.metadata import IMetadataProvider
from flushaudit.application.services.identity_resolver import IdentityResolver


class EntitySummarizer:
    """Builds ``{label, class, table, <id field>: id}`` summaries."""

    def __init__(self, metadata: IMetadataProvider, identity_resolver: IdentityResolver) -> None:
        self.metadata = metadata
        self.identity_resolver = identity_resolver

    def summarize(self, entity: Any, explicit_id: Any = None) -> dict[str, Any] | None:
        """Return the summary of ``entity``, or None for a null reference.

        ``explicit_id`` is used for entities whose identity was captured
        earlier (already deleted rows). A reference whose identity resolves
        to None (e.g. a lazy reference that did not materialize) also yields
        None rather than an error.
        """
        if entity is None:
            return None

        self.metadata.initialize(entity)
        entity_type = type(entity)
        pk_name = self.metadata.identifier_field(entity_type)
        pk_value = explicit_id
        if pk_value is None:
            pk_value = self.identity_resolver.identity(entity)
        if pk_value is None:
            return None

        name = self.metadata.entity_name(entity_type)
        return {
            "label": self.label(entity, name, pk_value),
            "class": name,
            "table": self.metadata.table(entity_type).name,
            pk_name: pk_value,
        }

    @staticmethod
    def label(entity: Any, name: str, pk_value: Any) -> str:
        """The entity's own string form if its class defines one, else ``Name#id``."""
        if type(entity).__str__ is not object.__str__:
            return str(entity)
        return f"{name}#{pk_value}"
