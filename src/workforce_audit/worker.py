"""Audit worker – wires Redis, MongoDB and RabbitMQ into the audit pipeline."""
from __future__ import annotations

import asyncio
import dataclasses
import signal
from collections.abc import Mapping
from typing import Any

from workforce_audit.adapters.mongodb import MongoAuditStore, create_motor_client
from workforce_audit.adapters.rabbitmq import RabbitMQConnection, RabbitMQEventConsumer
from workforce_audit.adapters.redis import RedisCache, RedisSnapshotStore
from workforce_audit.application.audit import AuditRecordBuilder
from workforce_audit.config import (
    AuditSettings,
    MongoSettings,
    RabbitMQSettings,
    RedisSettings,
    SettingsFactory,
)
from workforce_audit.observability.health import (
    HealthRegistry,
    HealthReport,
    MongoHealthCheck,
    RabbitMQHealthCheck,
    RedisHealthCheck,
)
from workforce_audit.observability.logging import JsonLoggerFactory, get_logger
from workforce_audit.resilience.retry import ExponentialBackoff, FullJitter, RetryPolicy

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class WorkerSettings:
    """Every settings group the worker needs."""

    rabbitmq: RabbitMQSettings = dataclasses.field(default_factory=RabbitMQSettings)
    redis: RedisSettings = dataclasses.field(default_factory=RedisSettings)
    mongo: MongoSettings = dataclasses.field(default_factory=MongoSettings)
    audit: AuditSettings = dataclasses.field(default_factory=AuditSettings)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WorkerSettings":
        return cls(
            rabbitmq=SettingsFactory.from_env(RabbitMQSettings, environ),
            redis=SettingsFactory.from_env(RedisSettings, environ),
            mongo=SettingsFactory.from_env(MongoSettings, environ),
            audit=SettingsFactory.from_env(AuditSettings, environ),
        )


class AuditWorker:
    """Long-running consumer that turns workforce events into audit records.

    Usage::

        worker = AuditWorker(WorkerSettings.from_env())
        await worker.run()   # blocks until SIGINT / SIGTERM
    """

    def __init__(self, settings: WorkerSettings) -> None:
        self._settings = settings
        self._cache: RedisCache | None = None
        self._snapshots: RedisSnapshotStore | None = None
        self._mongo_client: Any = None
        self._connection: RabbitMQConnection | None = None
        self._consumer: RabbitMQEventConsumer | None = None
        self._health = HealthRegistry()
        self._stop_event = asyncio.Event()

    @property
    def consumer(self) -> RabbitMQEventConsumer | None:
        return self._consumer

    async def start(self) -> None:
        """Connect every backing service and begin consuming."""
        s = self._settings

        self._cache = RedisCache(
            s.redis.url,
            socket_connect_timeout=s.redis.connect_timeout_seconds,
        )
        self._snapshots = RedisSnapshotStore(
            self._cache,
            default_ttl=s.redis.snapshot_ttl_seconds,
            max_ttl=s.redis.max_snapshot_ttl_seconds,
        )

        self._mongo_client = create_motor_client(s.mongo.url)
        database = self._mongo_client[s.mongo.database]
        collection = database[s.mongo.audit_collection]
        await MongoAuditStore.create_indexes(collection)
        audit_store = MongoAuditStore(collection)

        builder = AuditRecordBuilder(
            audit_store,
            self._snapshots,
            actor=s.audit.default_actor,
            strict=s.audit.strict_entity_resolution,
        )

        self._connection = RabbitMQConnection(
            s.rabbitmq.url,
            exchange_name=s.rabbitmq.exchange_name,
            exchange_type=s.rabbitmq.exchange_type,
            retry_policy=RetryPolicy(
                max_attempts=s.rabbitmq.connect_attempts,
                backoff=ExponentialBackoff(base_delay=1.0, max_delay=30.0),
                jitter=FullJitter(),
            ),
        )
        self._consumer = RabbitMQEventConsumer(
            self._connection,
            builder.build,
            queue_name=s.rabbitmq.queue_name,
            routing_keys=s.rabbitmq.routing_keys,
            prefetch_count=s.rabbitmq.prefetch_count,
            max_retries=s.audit.max_retries,
            dead_letter_queue=s.audit.dead_letter_queue,
            processing_timeout=s.audit.processing_timeout_seconds,
        )

        self._health.register(MongoHealthCheck(database))
        self._health.register(RedisHealthCheck(self._cache))
        self._health.register(RabbitMQHealthCheck(self._connection))

        await self._consumer.start()
        logger.info(
            "audit_worker_started",
            queue=s.rabbitmq.queue_name,
            exchange=s.rabbitmq.exchange_name,
            database=s.mongo.database,
        )

    async def stop(self) -> None:
        """Stop consuming and release every connection.  Idempotent."""
        if self._consumer is not None:
            await self._consumer.stop()
            self._consumer = None
        if self._snapshots is not None:
            await self._snapshots.close()
            self._snapshots = None
            self._cache = None
        if self._mongo_client is not None:
            self._mongo_client.close()
            self._mongo_client = None
        logger.info("audit_worker_stopped")

    def request_stop(self) -> None:
        self._stop_event.set()

    async def health(self) -> HealthReport:
        return await self._health.run_all()

    async def run(self) -> None:
        """Configure logging, start, and block until a shutdown signal arrives."""
        JsonLoggerFactory.configure(
            self._settings.audit.log_level,
            service=self._settings.audit.service_name,
        )
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._on_signal, sig)
        try:
            await self.start()
            await self._stop_event.wait()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.stop()

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("shutdown_signal_received", signal=sig.name)
        self.request_stop()


__all__ = ["AuditWorker", "WorkerSettings"]
