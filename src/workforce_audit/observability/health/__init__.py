"""Observability – Health Checks."""
from workforce_audit.observability.health.builtin import (
    HealthCheck,
    HealthStatus,
    MongoHealthCheck,
    RabbitMQHealthCheck,
    RedisHealthCheck,
)
from workforce_audit.observability.health.registry import HealthRegistry, HealthReport

__all__ = [
    "HealthCheck",
    "HealthRegistry",
    "HealthReport",
    "HealthStatus",
    "MongoHealthCheck",
    "RabbitMQHealthCheck",
    "RedisHealthCheck",
]
