"""Kernel messaging – envelope, event types, snapshot and publisher ports."""
from workforce_audit.kernel.messaging.envelope import EventEnvelope, new_event_id
from workforce_audit.kernel.messaging.events import AuditEventType, routing_key_for
from workforce_audit.kernel.messaging.ports import EnvelopeHandler, EventConsumer, EventPublisher
from workforce_audit.kernel.messaging.snapshot import (
    DEFAULT_SNAPSHOT_TTL,
    SnapshotPhase,
    SnapshotStore,
    snapshot_key,
)

__all__ = [
    "DEFAULT_SNAPSHOT_TTL",
    "AuditEventType",
    "EnvelopeHandler",
    "EventConsumer",
    "EventEnvelope",
    "EventPublisher",
    "SnapshotPhase",
    "SnapshotStore",
    "new_event_id",
    "routing_key_for",
    "snapshot_key",
]
