"""Application audit – AuditRecordBuilder."""

from __future__ import annotations

from typing import Any

from workforce_audit.application.audit.entity import (
    UNKNOWN_ENTITY_TYPE,
    EntityIdResolver,
    extract_entity_type,
)
from workforce_audit.application.audit.record import DEFAULT_ACTOR, AuditRecord
from workforce_audit.application.audit.store import AuditStore
from workforce_audit.kernel.errors import DuplicateAuditRecordError, EntityResolutionError
from workforce_audit.kernel.messaging import EventEnvelope, SnapshotPhase, SnapshotStore, snapshot_key
from workforce_audit.kernel.time import Clock, SystemClock
from workforce_audit.kernel.values import normalize
from workforce_audit.observability.logging import get_logger

logger = get_logger(__name__)


class AuditRecordBuilder:
    """Turn an :class:`EventEnvelope` plus its snapshots into one stored :class:`AuditRecord`.

    Steps, per envelope:

    1. skip when a record for ``event_id`` already exists;
    2. derive the entity type from the routing key and the entity id from
       ``data`` (see :class:`EntityIdResolver`);
    3. read the ``before`` / ``after`` snapshots (either may be absent);
    4. normalize snapshots and payload into storage-safe trees;
    5. ``after`` falls back to the normalized payload when no after-snapshot
       exists (typical for creates);
    6. insert the record, then delete both snapshot keys best-effort.

    A concurrent consumer winning the insert race surfaces as
    :class:`DuplicateAuditRecordError` and is treated like step 1.

    With ``strict=False`` (default) an unresolvable entity is recorded as
    ``"Unknown"`` / ``""`` and logged.  With ``strict=True``
    :class:`EntityResolutionError` is raised so the message is retried and
    eventually dead-lettered.
    """

    def __init__(
        self,
        audit_store: AuditStore,
        snapshot_store: SnapshotStore,
        *,
        resolver: EntityIdResolver | None = None,
        actor: str = DEFAULT_ACTOR,
        strict: bool = False,
        clock: Clock | None = None,
    ) -> None:
        self._audit_store = audit_store
        self._snapshots = snapshot_store
        self._resolver = resolver or EntityIdResolver()
        self._actor = actor
        self._strict = strict
        self._clock = clock or SystemClock()

    async def __call__(self, envelope: EventEnvelope) -> AuditRecord | None:
        return await self.build(envelope)

    async def build(self, envelope: EventEnvelope) -> AuditRecord | None:
        """Build and persist the record for *envelope*.

        Returns:
            The stored record, or ``None`` when the event was already audited.
        """
        event_id = envelope.event_id
        if await self._audit_store.exists(event_id):
            logger.info("audit_record_exists", event_id=event_id)
            return None

        entity_type, entity_id = self._resolve_entity(envelope)

        before_key = snapshot_key(event_id, SnapshotPhase.BEFORE)
        after_key = snapshot_key(event_id, SnapshotPhase.AFTER)
        before_snapshot = await self._snapshots.get(before_key)
        after_snapshot = await self._snapshots.get(after_key)

        before = normalize(before_snapshot) if before_snapshot is not None else None
        if after_snapshot is not None:
            after = normalize(after_snapshot)
        else:
            after = normalize(envelope.data)

        record = AuditRecord(
            event_id=event_id,
            event_type=envelope.event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=self._actor,
            timestamp=self._clock.now(),
            before=before,
            after=after,
            metadata=self._metadata(envelope, before_snapshot, after_snapshot),
        )

        try:
            await self._audit_store.insert(record)
        except DuplicateAuditRecordError:
            logger.info("audit_record_duplicate", event_id=event_id)
            return None

        logger.info(
            "audit_record_created",
            event_id=event_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        await self._cleanup(before_key, after_key)
        return record

    def _resolve_entity(self, envelope: EventEnvelope) -> tuple[str, str]:
        entity_type = extract_entity_type(envelope.event_type)
        entity_id = self._resolver.resolve(envelope.data, entity_type)
        if entity_type != UNKNOWN_ENTITY_TYPE and entity_id:
            return entity_type, entity_id

        if self._strict:
            raise EntityResolutionError(envelope.event_type, entity_type=entity_type)
        logger.warning(
            "audit_entity_unresolved",
            event_id=envelope.event_id,
            event_type=envelope.event_type,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        return entity_type, entity_id

    @staticmethod
    def _metadata(envelope: EventEnvelope, before: Any, after: Any) -> dict[str, Any]:
        return {
            "snapshotBefore": before is not None,
            "snapshotAfter": after is not None,
            "publishedAt": envelope.timestamp,
        }

    async def _cleanup(self, *keys: str) -> None:
        for key in keys:
            try:
                await self._snapshots.delete(key)
            except Exception as exc:  # noqa: BLE001
                # keys expire through their TTL anyway
                logger.warning("snapshot_cleanup_failed", key=key, error=repr(exc))


__all__ = ["AuditRecordBuilder"]
