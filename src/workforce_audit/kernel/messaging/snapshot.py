"""Kernel messaging – snapshot store port and key scheme."""
from __future__ import annotations

import abc
from enum import Enum
from typing import Any

SNAPSHOT_KEY_PREFIX = "audit"
DEFAULT_SNAPSHOT_TTL = 3600


class SnapshotPhase(str, Enum):
    BEFORE = "before"
    AFTER = "after"


def snapshot_key(event_id: str, phase: SnapshotPhase | str) -> str:
    """Return ``audit:{event_id}:{phase}``."""
    return f"{SNAPSHOT_KEY_PREFIX}:{event_id}:{SnapshotPhase(phase).value}"


class SnapshotStore(abc.ABC):
    """Port: short-lived key/value cache holding entity snapshots.

    ``set`` surfaces failures to the caller.  ``get``, ``delete`` and
    ``exists`` degrade to absent / no-op / ``False`` when the store is
    unreachable, so a cache outage yields audit records without snapshot
    data instead of halting the pipeline.
    """

    @abc.abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    @abc.abstractmethod
    async def get(self, key: str) -> Any | None: ...

    @abc.abstractmethod
    async def delete(self, key: str) -> None: ...

    @abc.abstractmethod
    async def exists(self, key: str) -> bool: ...


__all__ = [
    "DEFAULT_SNAPSHOT_TTL",
    "SNAPSHOT_KEY_PREFIX",
    "SnapshotPhase",
    "SnapshotStore",
    "snapshot_key",
]
