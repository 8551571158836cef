"""Service interfaces (ports) consumed or exposed by the audit core."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flushaudit.domain.records import AuditPayload


class IEligibilityPredicate(Protocol):
    """Protocol for deciding which entities and fields are audited."""

    def is_audited(self, entity_or_type: Any) -> bool:
        """True if the entity (or type) is audited."""

    def is_audited_field(self, entity_or_type: Any, field: str) -> bool:
        """True if the field of an audited entity is audited."""


class IAuditSink(Protocol):
    """Protocol for the durable audit store; one payload per call."""

    def write(self, payload: AuditPayload) -> None:
        """Persist or emit one audit payload."""


@runtime_checkable
class AuditActor(Protocol):
    """Capability an actor must have to be blamed: an identifier and a display name."""

    @property
    def id(self) -> Any: ...

    @property
    def username(self) -> str: ...
