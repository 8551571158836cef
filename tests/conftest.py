"""Pytest configuration and shared fixtures for flushaudit.

Unit tests run against the in-memory fakes in tests/fakes.py; integration
tests use SQLite in memory (tests/models.py).
"""

import pytest

from flushaudit.application.services import ValueNormalizer
from flushaudit.core.config import AuditConfiguration, get_settings
from flushaudit.infrastructure.sinks import InMemorySink
from flushaudit.shared.context import clear_blame_context
from tests.fakes import FakeMetadata, FakeSnapshot, make_configuration


@pytest.fixture(autouse=True)
def _isolated_context(monkeypatch: pytest.MonkeyPatch):
    """No AUDIT_* leakage from the environment and no blame context across tests."""
    monkeypatch.delenv("AUDIT_ENTITIES", raising=False)
    monkeypatch.delenv("AUDIT_ENABLED", raising=False)
    get_settings.cache_clear()
    clear_blame_context()
    yield
    clear_blame_context()
    get_settings.cache_clear()


@pytest.fixture
def metadata() -> FakeMetadata:
    return FakeMetadata()


@pytest.fixture
def configuration() -> AuditConfiguration:
    return make_configuration()


@pytest.fixture
def normalizer() -> ValueNormalizer:
    return ValueNormalizer()


@pytest.fixture
def snapshot() -> FakeSnapshot:
    return FakeSnapshot()


@pytest.fixture
def sink() -> InMemorySink:
    return InMemorySink()
