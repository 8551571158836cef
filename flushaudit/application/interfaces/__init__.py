"""Application interfaces (ports): metadata, snapshot and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from flushaudit.infrastructure.
"""

from flushaudit.application.interfaces.metadata import (
    AssociationInfo,
    FieldType,
    IMetadataProvider,
    TableInfo,
)
from flushaudit.application.interfaces.services import (
    AuditActor,
    IAuditSink,
    IEligibilityPredicate,
)
from flushaudit.application.interfaces.snapshot import (
    CollectionDeletion,
    CollectionUpdate,
    ITransactionalSnapshot,
)

__all__ = [
    "AssociationInfo",
    "AuditActor",
    "CollectionDeletion",
    "CollectionUpdate",
    "FieldType",
    "IAuditSink",
    "IEligibilityPredicate",
    "IMetadataProvider",
    "ITransactionalSnapshot",
    "TableInfo",
]
