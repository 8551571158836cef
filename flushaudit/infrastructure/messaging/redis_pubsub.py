"""Redis Pub/Sub fan-out of audit payloads.

Publishes each payload as JSON on ``<prefix>:<table>`` so listeners
(dashboards, WebSocket bridges) can follow audit activity live. Flush hooks
are synchronous, so write() only enqueues; the queue is drained by
drain() or by the background task started with start(). Publishing is
best-effort and never part of the audited transaction.
"""

from __future__ import annotations

import asyncio
import json

import redis.asyncio as redis

from flushaudit.core.config import AuditSettings, get_settings
from flushaudit.domain.records import AuditPayload
from flushaudit.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RedisAuditPublisher:
    """IAuditSink publishing payloads to Redis channels.

    write() must be called from the thread running the event loop (the
    case for AsyncSession flushes).
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: AuditSettings | None = None,
        max_queue_size: int = 10_000,
    ) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None
        self._queue: asyncio.Queue[tuple[str, str]] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task | None = None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value()
                if self.settings.redis_password
                else None,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            await self.redis.ping()
            self._connected = True
            logger.info("Redis audit publisher connected")
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis audit publisher connection failed: %s", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Flush pending messages and close the connection. Call on app shutdown."""
        await self.stop()
        await self.drain()
        if self.redis:
            await self.redis.close()
            self._connected = False
            logger.info("Redis audit publisher disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def channel_for(self, payload: AuditPayload) -> str:
        return f"{self.settings.redis_channel_prefix}:{payload.table}"

    def write(self, payload: AuditPayload) -> None:
        """Queue a payload for publishing; dropped with a warning when the queue is full."""
        message = json.dumps(payload.to_dict())
        try:
            self._queue.put_nowait((self.channel_for(payload), message))
        except asyncio.QueueFull:
            logger.warning("Audit publish queue full, dropping payload %s", payload.id)

    async def publish(self, channel: str, message: str) -> bool:
        """Publish one message.

        Returns:
            True if published, False if Redis is unavailable or the publish failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping audit publish")
            return False
        try:
            await self.redis.publish(channel, message)
        except redis.RedisError:
            logger.exception("Failed to publish audit payload to %s", channel)
            return False
        else:
            return True

    async def drain(self) -> int:
        """Publish everything queued so far. Returns the number published."""
        published = 0
        while not self._queue.empty():
            channel, message = self._queue.get_nowait()
            if await self.publish(channel, message):
                published += 1
            self._queue.task_done()
        return published

    def start(self) -> None:
        """Start a background task publishing queued payloads as they arrive."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        worker, self._worker = self._worker, None
        if worker is None or worker.done():
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            channel, message = await self._queue.get()
            try:
                await self.publish(channel, message)
            except Exception:
                logger.exception("Audit publish worker error on %s", channel)
            finally:
                self._queue.task_done()
