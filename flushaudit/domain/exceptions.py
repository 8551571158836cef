"""Domain exceptions for flush auditing.

Every exception here is fatal for the transaction being audited: raised
from a flush hook, it aborts the flush so no partial or inconsistent set of
audit payloads is ever produced. Blame resolution never raises; missing
context degrades to null fields instead.
"""

from typing import Any


class AuditException(Exception):
    """Base exception for all audit errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. entity, field).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class MetadataException(AuditException):
    """Raised when a field, type, identifier or association cannot be resolved."""

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize with message and optional entity / field names.

        Args:
            message: Description of the metadata failure.
            entity: Entity type name the lookup was made for.
            field: Field name the lookup was made for.
        """
        details: dict[str, Any] = {}
        if entity:
            details["entity"] = entity
        if field:
            details["field"] = field
        super().__init__(message, "METADATA_ERROR", details)


class IdentityResolutionException(AuditException):
    """Raised when an entity's identifier cannot be resolved."""

    def __init__(self, entity: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot resolve identifier of {entity}",
            "IDENTITY_RESOLUTION_ERROR",
            {"entity": entity},
        )


class SerializationException(AuditException):
    """Raised when a value cannot be normalized or JSON-encoded."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "SERIALIZATION_ERROR", details)


class TransactionStateException(AuditException):
    """Raised when a transaction is collected or processed more than once."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "TRANSACTION_STATE_ERROR")
