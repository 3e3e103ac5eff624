"""Redis adapter – RedisSnapshotStore."""
from __future__ import annotations

import json
from typing import Any

from workforce_audit.adapters.redis.cache import RedisCache
from workforce_audit.kernel.errors import SnapshotWriteError
from workforce_audit.kernel.messaging import DEFAULT_SNAPSHOT_TTL, SnapshotStore
from workforce_audit.kernel.values import to_json
from workforce_audit.observability.logging import get_logger

logger = get_logger(__name__)


class RedisSnapshotStore(SnapshotStore):
    """Snapshot store backed by Redis string keys with per-key expiry.

    Values are stored as JSON documents.  Every write carries a TTL, clamped
    to *max_ttl*, so snapshots of events that are never consumed expire on
    their own.

    Failure semantics
    ~~~~~~~~~~~~~~~~~
    :meth:`set` raises :class:`SnapshotWriteError`.  :meth:`get`,
    :meth:`delete` and :meth:`exists` log and behave as if the key were
    absent: "missing" and "store unreachable" are indistinguishable to the
    caller.
    """

    def __init__(
        self,
        cache: RedisCache,
        default_ttl: int = DEFAULT_SNAPSHOT_TTL,
        max_ttl: int = DEFAULT_SNAPSHOT_TTL,
    ) -> None:
        self._cache = cache
        self._default_ttl = default_ttl
        self._max_ttl = max(max_ttl, 1)

    def _effective_ttl(self, ttl: int | None) -> int:
        if ttl is None or ttl <= 0:
            ttl = self._default_ttl
        return min(ttl, self._max_ttl)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            await self._cache.set(key, to_json(value), ttl=self._effective_ttl(ttl))
        except Exception as exc:
            logger.error("snapshot_write_failed", key=key, error=repr(exc))
            raise SnapshotWriteError(key, cause=exc) from exc

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._cache.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("snapshot_read_failed", key=key, error=repr(exc))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("snapshot_not_json", key=key, error=repr(exc))
            return None

    async def delete(self, key: str) -> None:
        try:
            await self._cache.delete(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("snapshot_delete_failed", key=key, error=repr(exc))

    async def exists(self, key: str) -> bool:
        try:
            return await self._cache.exists(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("snapshot_exists_failed", key=key, error=repr(exc))
            return False

    async def ping(self) -> bool:
        return await self._cache.ping()

    async def close(self) -> None:
        await self._cache.close()


__all__ = ["RedisSnapshotStore"]
