"""Tests for DiffEngine: audited, changed, normalized fields only, sorted by name."""

from datetime import date
from decimal import Decimal

import pytest

from flushaudit.application.services import (
    DiffEngine,
    EntitySummarizer,
    IdentityResolver,
    ValueNormalizer,
)
from flushaudit.core.config import EntityAuditOptions
from flushaudit.domain.records import merge_changesets
from tests.fakes import Author, FakeMetadata, Invoice, make_configuration


@pytest.fixture
def engine(metadata: FakeMetadata, normalizer: ValueNormalizer) -> DiffEngine:
    configuration = make_configuration(
        {
            "Invoice": EntityAuditOptions(ignored_columns=["note"]),
            "Author": EntityAuditOptions(),
        }
    )
    summarizer = EntitySummarizer(metadata, IdentityResolver(metadata, normalizer))
    return DiffEngine(metadata, configuration, normalizer, summarizer)


class TestDiff:
    def test_unaudited_field_is_dropped(self, engine: DiffEngine) -> None:
        changeset = {"amount": (100, 150), "note": ("", "paid")}
        assert engine.diff(Invoice(id=1), changeset) == {
            "amount": {"old": Decimal(100), "new": Decimal(150)}
        }

    def test_normalized_equal_values_are_not_a_change(self, engine: DiffEngine) -> None:
        changeset = {"amount": (Decimal("100.0"), Decimal("100.00"))}
        assert engine.diff(Invoice(id=1), changeset) == {}

    def test_single_valued_association_compares_summaries(self, engine: DiffEngine) -> None:
        old, new = Author(id=1, name="Ada"), Author(id=2, name="Grace")
        diff = engine.diff(Invoice(id=1), {"author": (old, new)})
        assert diff["author"]["old"]["id"] == 1
        assert diff["author"]["new"] == {
            "label": "Grace",
            "class": "Author",
            "table": "author",
            "id": 2,
        }

    def test_association_set_from_null(self, engine: DiffEngine) -> None:
        diff = engine.diff(Invoice(id=1), {"author": (None, Author(id=2))})
        assert diff["author"]["old"] is None

    def test_collections_embedded_and_unknown_fields_are_omitted(self, engine: DiffEngine) -> None:
        changeset = {
            "lines": ([], [object()]),
            "billing_address": (None, object()),
            "computed_total": (1, 2),
        }
        assert engine.diff(Invoice(id=1), changeset) == {}

    def test_result_is_ordered_by_field_name(self, engine: DiffEngine) -> None:
        changeset = {
            "issued_on": (None, date(2024, 1, 1)),
            "amount": (1, 2),
            "author": (None, Author(id=1)),
        }
        assert list(engine.diff(Invoice(id=1), changeset)) == ["amount", "author", "issued_on"]

    def test_merging_a_changeset_with_itself_is_idempotent(self, engine: DiffEngine) -> None:
        changeset = {"amount": (100, 150), "issued_on": (None, date(2024, 1, 1))}
        invoice = Invoice(id=1)
        assert engine.diff(invoice, merge_changesets(changeset, changeset)) == engine.diff(
            invoice, changeset
        )

    def test_globally_ignored_field(self, metadata: FakeMetadata, normalizer: ValueNormalizer) -> None:
        configuration = make_configuration(ignored_columns=["amount"])
        summarizer = EntitySummarizer(metadata, IdentityResolver(metadata, normalizer))
        engine = DiffEngine(metadata, configuration, normalizer, summarizer)
        assert engine.diff(Invoice(id=1), {"amount": (1, 2)}) == {}
