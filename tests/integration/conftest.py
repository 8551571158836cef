"""Fixtures for end-to-end flush auditing against SQLite in memory."""

from collections.abc import Iterator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from flushaudit.core.config import AuditConfiguration, AuditSettings, EntityAuditOptions
from flushaudit.infrastructure.persistence import AuditFlushListener, install_audit_listener
from flushaudit.infrastructure.sinks import InMemorySink
from flushaudit.shared.utils.naming import qualified_name
from tests.models import AUDITED_MODELS, Base, Invoice


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def audit_configuration() -> AuditConfiguration:
    entities = {qualified_name(model): EntityAuditOptions() for model in AUDITED_MODELS}
    entities[qualified_name(Invoice)] = EntityAuditOptions(ignored_columns=["note"])
    return AuditConfiguration(AuditSettings(_env_file=None, entities=entities))


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=True)


@pytest.fixture
def audit_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def audit_listener(
    session_factory: sessionmaker[Session],
    audit_configuration: AuditConfiguration,
    audit_sink: InMemorySink,
) -> Iterator[AuditFlushListener]:
    listener = install_audit_listener(session_factory, audit_configuration, sink=audit_sink)
    yield listener
    listener.detach()


@pytest.fixture
def session(
    session_factory: sessionmaker[Session], audit_listener: AuditFlushListener
) -> Iterator[Session]:
    with session_factory() as session:
        yield session
