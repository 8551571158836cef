"""Tests for RedisAuditPublisher (Redis client mocked)."""

import asyncio
import json
import logging
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import redis.asyncio as redis

from flushaudit.core.config import AuditSettings
from flushaudit.domain.enums import AuditAction
from flushaudit.domain.records import AuditPayload
from flushaudit.infrastructure.messaging import RedisAuditPublisher


def _payload(payload_id: str = "p1", table: str = "blog.post") -> AuditPayload:
    return AuditPayload(
        id=payload_id,
        entity="Post",
        table=table,
        type=AuditAction.INSERT,
        object_id="7",
        discriminator=None,
        transaction_hash="a" * 40,
        diffs='{"title": {"old": null, "new": "Hello"}}',
        created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
    )


def _settings() -> AuditSettings:
    return AuditSettings(_env_file=None)


class TestRedisAuditPublisher:
    async def test_write_queues_and_drain_publishes(self) -> None:
        client = AsyncMock()
        publisher = RedisAuditPublisher(client, _settings())

        publisher.write(_payload())
        assert publisher.pending == 1

        assert await publisher.drain() == 1
        assert publisher.pending == 0
        client.publish.assert_awaited_once()
        channel, message = client.publish.await_args.args
        assert channel == "audit:blog.post"
        decoded = json.loads(message)
        assert decoded["id"] == "p1"
        assert decoded["type"] == "insert"
        assert decoded["created_at"] == "2024-01-02T03:04:05+00:00"

    async def test_channel_uses_configured_prefix(self) -> None:
        settings = AuditSettings(_env_file=None, redis_channel_prefix="changes")
        publisher = RedisAuditPublisher(AsyncMock(), settings)
        assert publisher.channel_for(_payload(table="tag")) == "changes:tag"

    async def test_full_queue_drops_payload_with_warning(self, caplog) -> None:
        publisher = RedisAuditPublisher(AsyncMock(), _settings(), max_queue_size=1)
        publisher.write(_payload("p1"))

        with caplog.at_level(logging.WARNING):
            publisher.write(_payload("p2"))

        assert publisher.pending == 1
        assert "dropping payload p2" in caplog.text

    async def test_unavailable_publisher_publishes_nothing(self) -> None:
        publisher = RedisAuditPublisher(None, _settings())
        assert publisher.is_available() is False

        publisher.write(_payload())
        assert await publisher.drain() == 0
        assert publisher.pending == 0

    async def test_publish_failure_returns_false(self) -> None:
        client = AsyncMock()
        client.publish.side_effect = redis.ConnectionError("gone")
        publisher = RedisAuditPublisher(client, _settings())

        assert await publisher.publish("audit:tag", "{}") is False

    async def test_any_redis_error_is_a_failed_publish(self) -> None:
        client = AsyncMock()
        client.publish.side_effect = redis.ResponseError("WRONGTYPE")
        publisher = RedisAuditPublisher(client, _settings())

        assert await publisher.publish("audit:tag", "{}") is False

    async def test_connect_failure_leaves_publisher_unavailable(self) -> None:
        instance = MagicMock()
        instance.ping = AsyncMock(side_effect=redis.ConnectionError("refused"))
        with patch(
            "flushaudit.infrastructure.messaging.redis_pubsub.redis.Redis",
            return_value=instance,
        ):
            publisher = RedisAuditPublisher(settings=_settings())
            await publisher.connect()

        assert publisher.is_available() is False
        assert publisher.redis is None

    async def test_worker_publishes_as_payloads_arrive(self) -> None:
        client = AsyncMock()
        publisher = RedisAuditPublisher(client, _settings())
        publisher.start()

        publisher.write(_payload())
        await asyncio.wait_for(publisher._queue.join(), timeout=1)
        await publisher.stop()

        client.publish.assert_awaited_once()
        assert publisher._worker is None

    async def test_worker_keeps_running_after_an_error(self, caplog) -> None:
        client = AsyncMock()
        client.publish.side_effect = [RuntimeError("boom"), 1]
        publisher = RedisAuditPublisher(client, _settings())
        publisher.start()

        with caplog.at_level(logging.ERROR):
            publisher.write(_payload("p1"))
            publisher.write(_payload("p2"))
            await asyncio.wait_for(publisher._queue.join(), timeout=1)

        assert client.publish.await_count == 2
        assert not publisher._worker.done()
        assert "Audit publish worker error on audit:blog.post" in caplog.text
        await publisher.stop()

    async def test_disconnect_drains_and_closes(self) -> None:
        client = AsyncMock()
        publisher = RedisAuditPublisher(client, _settings())
        publisher.write(_payload())

        await publisher.disconnect()

        client.publish.assert_awaited_once()
        client.close.assert_awaited_once()
        assert publisher.is_available() is False
