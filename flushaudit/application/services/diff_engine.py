"""Diff engine: field-level diff of one entity's changeset."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flushaudit.application.interfaces.metadata import IMetadataProvider
from flushaudit.application.interfaces.services import IEligibilityPredicate
from flushaudit.application.services.entity_summarizer import EntitySummarizer
from flushaudit.application.services.value_normalizer import ValueNormalizer


class DiffEngine:
    """Computes ``{field: {"old": ..., "new": ...}}`` for audited fields that changed.

    Plain fields compare normalized values; single-valued associations
    compare entity summaries. Embedded containers, collections and unmapped
    fields never appear. The result is ordered by field name.
    """

    def __init__(
        self,
        metadata: IMetadataProvider,
        eligibility: IEligibilityPredicate,
        normalizer: ValueNormalizer,
        summarizer: EntitySummarizer,
    ) -> None:
        self.metadata = metadata
        self.eligibility = eligibility
        self.normalizer = normalizer
        self.summarizer = summarizer

    def diff(self, entity: Any, changeset: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        entity_type = type(entity)
        diff: dict[str, dict[str, Any]] = {}

        for field, (old, new) in changeset.items():
            if self.metadata.is_embedded(entity_type, field):
                continue
            if not self.eligibility.is_audited_field(entity, field):
                continue

            if self.metadata.has_field(entity_type, field):
                field_type = self.metadata.field_type(entity_type, field)
                o = self.normalizer.normalize(field_type, old, field)
                n = self.normalizer.normalize(field_type, new, field)
            else:
                association = self.metadata.association(entity_type, field)
                if association is None or not association.single_valued:
                    continue
                o = self.summarizer.summarize(old)
                n = self.summarizer.summarize(new)

            if o != n:
                diff[field] = {"old": o, "new": n}

        return dict(sorted(diff.items()))
