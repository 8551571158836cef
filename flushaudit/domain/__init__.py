"""Domain layer: enums, exceptions, mutation records and audit payloads.

No dependencies on SQLAlchemy or any storage engine.
"""

from flushaudit.domain.enums import AuditAction, InheritanceMode, SemanticType
from flushaudit.domain.exceptions import (
    AuditException,
    IdentityResolutionException,
    MetadataException,
    SerializationException,
    TransactionStateException,
)
from flushaudit.domain.records import (
    Associate,
    AuditPayload,
    Blame,
    Changeset,
    Dissociate,
    Insert,
    MutationRecord,
    RelationDescriptor,
    Remove,
    Update,
    merge_changesets,
)

__all__ = [
    # Enums
    "AuditAction",
    "InheritanceMode",
    "SemanticType",
    # Exceptions
    "AuditException",
    "IdentityResolutionException",
    "MetadataException",
    "SerializationException",
    "TransactionStateException",
    # Records
    "Associate",
    "AuditPayload",
    "Blame",
    "Changeset",
    "Dissociate",
    "Insert",
    "MutationRecord",
    "RelationDescriptor",
    "Remove",
    "Update",
    "merge_changesets",
]
