"""MongoDB adapter – MongoAuditStore."""

from __future__ import annotations

from typing import Any

from workforce_audit.application.audit import AuditQuery, AuditRecord, AuditStore
from workforce_audit.kernel.errors import DuplicateAuditRecordError
from workforce_audit.observability.logging import get_logger

logger = get_logger(__name__)


def _is_duplicate_key(exc: Exception) -> bool:
    message = str(exc)
    return "E11000" in message or "duplicate key" in message.lower()


class MongoAuditStore(AuditStore):
    """Append-only audit trail backed by a MongoDB collection.

    Documents use camelCase field names
    (``eventId``, ``entityType``, ``entityId`` …).  Call
    :meth:`create_indexes` once on startup to create:

    - a **unique index** on ``eventId``, the exactly-once guard when
      competing consumers race on the same event;
    - ``(entityType, entityId)``, ``eventType`` and ``timestamp`` indexes for
      the query paths.

    *collection* is a motor ``AsyncIOMotorCollection`` (or anything with the
    same coroutine API).
    """

    COLLECTION_NAME = "AuditLogs"

    def __init__(self, collection: Any) -> None:
        self._col = collection

    # ------------------------------------------------------------------
    # Index management
    # ------------------------------------------------------------------

    @classmethod
    async def create_indexes(cls, collection: Any) -> None:
        """Create the audit indexes.  Idempotent."""
        await collection.create_index("eventId", unique=True, name="idx_audit_event_id")
        await collection.create_index(
            [("entityType", 1), ("entityId", 1)],
            name="idx_audit_entity",
        )
        await collection.create_index("eventType", name="idx_audit_event_type")
        await collection.create_index([("timestamp", -1)], name="idx_audit_timestamp")

    # ------------------------------------------------------------------
    # AuditStore interface
    # ------------------------------------------------------------------

    async def insert(self, record: AuditRecord) -> None:
        try:
            await self._col.insert_one(record.to_document())
        except Exception as exc:
            if _is_duplicate_key(exc):
                raise DuplicateAuditRecordError(record.event_id, cause=exc) from None
            logger.error("audit_insert_failed", event_id=record.event_id, error=repr(exc))
            raise

    async def exists(self, event_id: str) -> bool:
        return await self._col.count_documents({"eventId": event_id}, limit=1) > 0

    async def get_by_event_id(self, event_id: str) -> AuditRecord | None:
        doc = await self._col.find_one({"eventId": event_id})
        return AuditRecord.from_document(doc) if doc is not None else None

    async def find(self, query: AuditQuery) -> list[AuditRecord]:
        cursor = self._col.find(
            self._to_filter(query),
            sort=[("timestamp", -1)],
        ).limit(query.limit)
        return [AuditRecord.from_document(doc) async for doc in cursor]

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_filter(query: AuditQuery) -> dict[str, Any]:
        flt: dict[str, Any] = {}
        if query.entity_type is not None:
            flt["entityType"] = query.entity_type
        if query.entity_id is not None:
            flt["entityId"] = query.entity_id
        if query.event_type is not None:
            flt["eventType"] = query.event_type
        window: dict[str, Any] = {}
        if query.start is not None:
            window["$gte"] = query.start
        if query.end is not None:
            window["$lt"] = query.end
        if window:
            flt["timestamp"] = window
        return flt


__all__ = ["MongoAuditStore"]
