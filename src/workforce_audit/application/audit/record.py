"""Application audit – AuditRecord."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import UTC, datetime
from typing import Any

DEFAULT_ACTOR = "System"


@dataclasses.dataclass(frozen=True)
class AuditRecord:
    """One immutable entry of the audit trail.

    Exactly one record exists per ``event_id``.  ``before`` and ``after``
    hold storage-safe trees (plain ``dict`` / ``list`` / primitives) produced
    by :func:`~workforce_audit.kernel.values.normalize`.
    """

    event_id: str
    event_type: str
    entity_type: str
    entity_id: str
    actor: str = DEFAULT_ACTOR
    timestamp: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    """Instant the record was built by the audit worker."""

    before: Any = None
    after: Any = None
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)
    id: str = dataclasses.field(default_factory=lambda: str(uuid.uuid4()))

    def to_document(self) -> dict[str, Any]:
        """Return the camelCase document stored in the ``AuditLogs`` collection."""
        return {
            "_id": self.id,
            "eventId": self.event_id,
            "eventType": self.event_type,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "actor": self.actor,
            "timestamp": self.timestamp,
            "before": self.before,
            "after": self.after,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "AuditRecord":
        timestamp = doc.get("timestamp") or datetime.now(UTC)
        # BSON datetimes come back naive unless the client is tz-aware
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return cls(
            id=str(doc["_id"]),
            event_id=doc.get("eventId", ""),
            event_type=doc.get("eventType", ""),
            entity_type=doc.get("entityType", ""),
            entity_id=doc.get("entityId", ""),
            actor=doc.get("actor") or DEFAULT_ACTOR,
            timestamp=timestamp,
            before=doc.get("before"),
            after=doc.get("after"),
            metadata=dict(doc.get("metadata") or {}),
        )


__all__ = ["DEFAULT_ACTOR", "AuditRecord"]
