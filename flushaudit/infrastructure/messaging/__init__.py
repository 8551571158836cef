"""Messaging: Redis pub/sub fan-out of audit payloads."""

from flushaudit.infrastructure.messaging.redis_pubsub import RedisAuditPublisher

__all__ = ["RedisAuditPublisher"]
