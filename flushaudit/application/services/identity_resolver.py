"""Identity resolver: canonical primary-key value of an entity."""

from __future__ import annotations

from typing import Any

from flushaudit.application.interfaces.metadata import IMetadataProvider
from flushaudit.application.services.value_normalizer import ValueNormalizer
from flushaudit.domain.exceptions import IdentityResolutionException, MetadataException


class IdentityResolver:
    """Resolves an entity's identifier, normalized like any other field value.

    When the identifier field is itself a relation (identity through a
    foreign entity), the related entity's identifier is used instead. That
    fallback goes exactly one level deep: a related type whose identifier is
    again a relation is a MetadataException. When the related entity is not
    loaded, the local key column behind the relation is read instead.
    """

    def __init__(self, metadata: IMetadataProvider, normalizer: ValueNormalizer) -> None:
        self.metadata = metadata
        self.normalizer = normalizer

    def identifier_field(self, entity: Any) -> str:
        return self.metadata.identifier_field(type(entity))

    def identity(self, entity: Any) -> Any:
        """Return the normalized identifier of ``entity`` (None if not assigned yet)."""
        entity_type = type(entity)
        pk = self.metadata.identifier_field(entity_type)
        if self.metadata.has_field(entity_type, pk):
            return self._read_normalized(entity, entity_type, pk)

        association = self.metadata.association(entity_type, pk)
        if association is None or not association.single_valued:
            raise MetadataException(
                f"Identifier '{pk}' is neither a field nor a single-valued association",
                entity=self.metadata.entity_name(entity_type),
                field=pk,
            )
        target_type = self.metadata.association_target(entity_type, pk)
        target_pk = self.metadata.identifier_field(target_type)
        if not self.metadata.has_field(target_type, target_pk):
            raise MetadataException(
                f"Identifier of {self.metadata.entity_name(target_type)} is itself "
                "an association; only one level of foreign identity is supported",
                entity=self.metadata.entity_name(entity_type),
                field=pk,
            )
        target = self.metadata.read(entity, pk)
        if target is not None:
            return self._read_normalized(target, target_type, target_pk)

        # related entity not loaded (e.g. only the key column was assigned)
        column = self.metadata.foreign_identifier_column(entity_type, pk)
        if column is not None:
            value = self._read_normalized(entity, entity_type, column)
            if value is not None:
                return value
        raise IdentityResolutionException(
            self.metadata.entity_name(entity_type),
            f"Foreign identity '{pk}' of {self.metadata.entity_name(entity_type)} is not set",
        )

    def _read_normalized(self, entity: Any, entity_type: type, field: str) -> Any:
        field_type = self.metadata.field_type(entity_type, field)
        return self.normalizer.normalize(field_type, self.metadata.read(entity, field), field)
