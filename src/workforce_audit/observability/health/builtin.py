"""Health checks for the audit worker's three backing services.

MongoDB and RabbitMQ are *critical*: without them no audit record can be
consumed or written.  Redis only holds the before/after snapshots; while it
is down records are still built from the event payload, so a failing Redis
check degrades the worker instead of failing it.
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, ClassVar


@dataclass(frozen=True, slots=True)
class HealthStatus:
    healthy: bool
    detail: str | None = None
    latency_ms: float = 0.0

    @classmethod
    def up(cls, detail: str | None = None) -> HealthStatus:
        return cls(healthy=True, detail=detail)

    @classmethod
    def down(cls, summary: str, exc: BaseException | None = None) -> HealthStatus:
        """Unhealthy status; *exc*, when given, is appended as ``summary: exc``."""
        return cls(healthy=False, detail=summary if exc is None else f"{summary}: {exc}")


class HealthCheck(ABC):
    """One backing service the worker depends on.

    Subclasses set :attr:`name` and implement :meth:`check`.  ``critical``
    decides whether a failure makes the whole worker unhealthy or only
    degraded.
    """

    name: ClassVar[str]
    critical: ClassVar[bool] = True

    @abstractmethod
    async def check(self) -> HealthStatus: ...

    async def timed_check(self) -> HealthStatus:
        started = time.perf_counter()
        status = await self.check()
        return replace(status, latency_ms=(time.perf_counter() - started) * 1000)


class MongoHealthCheck(HealthCheck):
    """Checks the audit store with the ``ping`` admin command."""

    name = "mongodb"

    def __init__(self, database: Any) -> None:
        self._db = database

    async def check(self) -> HealthStatus:
        try:
            await self._db.command("ping")
        except Exception as exc:  # noqa: BLE001
            return HealthStatus.down("MongoDB connection failed", exc)
        return HealthStatus.up("MongoDB connection is healthy")


class RedisHealthCheck(HealthCheck):
    """Checks the snapshot store with a PING."""

    name = "redis"
    critical = False

    def __init__(self, cache: Any) -> None:
        self._cache = cache

    async def check(self) -> HealthStatus:
        try:
            await self._cache.ping()
        except Exception as exc:  # noqa: BLE001
            return HealthStatus.down("snapshots unavailable", exc)
        return HealthStatus.up()


class RabbitMQHealthCheck(HealthCheck):
    """Reports whether the broker connection is currently open."""

    name = "rabbitmq"

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    async def check(self) -> HealthStatus:
        if self._connection.is_open:
            return HealthStatus.up()
        return HealthStatus.down("connection closed")


__all__ = [
    "HealthCheck",
    "HealthStatus",
    "MongoHealthCheck",
    "RabbitMQHealthCheck",
    "RedisHealthCheck",
]
