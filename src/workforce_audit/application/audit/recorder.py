"""Application audit – AuditSnapshotRecorder."""

from __future__ import annotations

from typing import Any

from workforce_audit.kernel.messaging import (
    DEFAULT_SNAPSHOT_TTL,
    AuditEventType,
    EventPublisher,
    SnapshotPhase,
    SnapshotStore,
    new_event_id,
    snapshot_key,
)
from workforce_audit.observability.logging import get_logger

logger = get_logger(__name__)


class AuditSnapshotRecorder:
    """Write snapshots, then publish, for the business side of the pipeline.

    The consumer looks the snapshots up as soon as the event arrives, so both
    writes must complete before the publish.  A failed write raises
    :class:`~workforce_audit.kernel.errors.SnapshotWriteError` and nothing is
    published.

    Usage::

        recorder = AuditSnapshotRecorder(snapshot_store, publisher)
        await recorder.record(
            AuditEventType.EMPLOYEE_UPDATED,
            {"EmployeeId": emp.id},
            before=old_state,
            after=new_state,
        )
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        publisher: EventPublisher,
        ttl: int = DEFAULT_SNAPSHOT_TTL,
    ) -> None:
        self._snapshots = snapshot_store
        self._publisher = publisher
        self._ttl = ttl

    async def record(
        self,
        event_type: AuditEventType | str,
        payload: Any,
        before: Any = None,
        after: Any = None,
        event_id: str | None = None,
    ) -> str:
        """Store the given snapshots and publish the event; return its id."""
        event_id = event_id or new_event_id()
        if before is not None:
            await self._snapshots.set(snapshot_key(event_id, SnapshotPhase.BEFORE), before, self._ttl)
        if after is not None:
            await self._snapshots.set(snapshot_key(event_id, SnapshotPhase.AFTER), after, self._ttl)
        logger.debug(
            "audit_snapshots_recorded",
            event_id=event_id,
            before=before is not None,
            after=after is not None,
        )
        return await self._publisher.publish(event_type, payload, event_id=event_id)


__all__ = ["AuditSnapshotRecorder"]
