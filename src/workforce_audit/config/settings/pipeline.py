"""Config settings – broker, cache, document store and pipeline settings."""
from __future__ import annotations

import dataclasses
from urllib.parse import quote

from workforce_audit.config.settings.base import Settings
from workforce_audit.config.validation import InvalidSettingValueError

_EXCHANGE_TYPES = frozenset({"topic", "direct", "fanout", "headers"})


@dataclasses.dataclass
class RabbitMQSettings(Settings):
    """Broker settings, read from ``RABBITMQ_*``."""

    _prefix = "RABBITMQ"

    host: str = "localhost"
    port: int = 5672
    username: str = "guest"
    password: str = "guest"
    virtual_host: str = "/"
    exchange_name: str = "workforce.events"
    exchange_type: str = "topic"
    queue_name: str = "audit.queue"
    routing_keys: list[str] = dataclasses.field(default_factory=lambda: ["#"])
    prefetch_count: int = 10
    connect_attempts: int = 5

    def _validate(self) -> None:
        if not 0 < self.port < 65536:
            raise InvalidSettingValueError("RABBITMQ_PORT", self.port, "must be a TCP port")
        if self.exchange_type not in _EXCHANGE_TYPES:
            raise InvalidSettingValueError(
                "RABBITMQ_EXCHANGE_TYPE", self.exchange_type, f"must be one of {sorted(_EXCHANGE_TYPES)}"
            )
        if not self.routing_keys:
            raise InvalidSettingValueError("RABBITMQ_ROUTING_KEYS", self.routing_keys, "at least one binding is required")
        if self.prefetch_count < 1:
            raise InvalidSettingValueError("RABBITMQ_PREFETCH_COUNT", self.prefetch_count, "must be positive")
        if self.connect_attempts < 1:
            raise InvalidSettingValueError("RABBITMQ_CONNECT_ATTEMPTS", self.connect_attempts, "must be positive")

    @property
    def url(self) -> str:
        vhost = quote(self.virtual_host, safe="")
        return (
            f"amqp://{quote(self.username, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{vhost}"
        )


@dataclasses.dataclass
class RedisSettings(Settings):
    """Snapshot cache settings, read from ``REDIS_*``."""

    _prefix = "REDIS"

    url: str = "redis://localhost:6379/0"
    connect_timeout_seconds: float = 5.0
    snapshot_ttl_seconds: int = 3600
    max_snapshot_ttl_seconds: int = 3600

    def _validate(self) -> None:
        if self.snapshot_ttl_seconds < 1:
            raise InvalidSettingValueError("REDIS_SNAPSHOT_TTL_SECONDS", self.snapshot_ttl_seconds, "must be positive")
        if self.max_snapshot_ttl_seconds < self.snapshot_ttl_seconds:
            raise InvalidSettingValueError(
                "REDIS_MAX_SNAPSHOT_TTL_SECONDS",
                self.max_snapshot_ttl_seconds,
                "must not be lower than REDIS_SNAPSHOT_TTL_SECONDS",
            )


@dataclasses.dataclass
class MongoSettings(Settings):
    """Audit store settings, read from ``MONGO_*``."""

    _prefix = "MONGO"

    url: str = "mongodb://localhost:27017"
    database: str = "workforce_db"
    audit_collection: str = "AuditLogs"


@dataclasses.dataclass
class AuditSettings(Settings):
    """Pipeline behaviour, read from ``AUDIT_*``."""

    _prefix = "AUDIT"

    service_name: str = "audit-worker"
    log_level: str = "INFO"
    default_actor: str = "System"
    strict_entity_resolution: bool = False
    max_retries: int | None = 5
    dead_letter_queue: str | None = None
    processing_timeout_seconds: float = 30.0

    def _validate(self) -> None:
        if self.max_retries is not None and self.max_retries < 0:
            raise InvalidSettingValueError("AUDIT_MAX_RETRIES", self.max_retries, "must be >= 0 or unset")
        if self.processing_timeout_seconds <= 0:
            raise InvalidSettingValueError(
                "AUDIT_PROCESSING_TIMEOUT_SECONDS", self.processing_timeout_seconds, "must be positive"
            )


__all__ = ["AuditSettings", "MongoSettings", "RabbitMQSettings", "RedisSettings"]
