"""Testing fakes – in-memory doubles for the pipeline ports."""
from workforce_audit.kernel.time import FrozenClock
from workforce_audit.testing.fakes.audit_store import InMemoryAuditStore
from workforce_audit.testing.fakes.clock import AUDIT_EPOCH, FakeClock
from workforce_audit.testing.fakes.publisher import InMemoryEventPublisher
from workforce_audit.testing.fakes.snapshot_store import InMemorySnapshotStore

__all__ = [
    "AUDIT_EPOCH",
    "FakeClock",
    "FrozenClock",
    "InMemoryAuditStore",
    "InMemoryEventPublisher",
    "InMemorySnapshotStore",
]
