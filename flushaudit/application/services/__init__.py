"""Application services: normalization, identity, diffing, blame, collection and dispatch."""

from flushaudit.application.services.audit_manager import AuditManager
from flushaudit.application.services.blame_resolver import BlameResolver
from flushaudit.application.services.diff_engine import DiffEngine
from flushaudit.application.services.entity_summarizer import EntitySummarizer
from flushaudit.application.services.identity_resolver import IdentityResolver
from flushaudit.application.services.transaction import AuditTransaction
from flushaudit.application.services.value_normalizer import ValueNormalizer

__all__ = [
    "AuditManager",
    "AuditTransaction",
    "BlameResolver",
    "DiffEngine",
    "EntitySummarizer",
    "IdentityResolver",
    "ValueNormalizer",
]
