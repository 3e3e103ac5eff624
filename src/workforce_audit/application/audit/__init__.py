"""Application audit – record builder, entity resolution, store port."""
from workforce_audit.application.audit.builder import AuditRecordBuilder
from workforce_audit.application.audit.entity import (
    UNKNOWN_ENTITY_TYPE,
    EntityIdResolver,
    extract_entity_type,
)
from workforce_audit.application.audit.record import DEFAULT_ACTOR, AuditRecord
from workforce_audit.application.audit.recorder import AuditSnapshotRecorder
from workforce_audit.application.audit.store import DEFAULT_QUERY_LIMIT, AuditQuery, AuditStore

__all__ = [
    "DEFAULT_ACTOR",
    "DEFAULT_QUERY_LIMIT",
    "UNKNOWN_ENTITY_TYPE",
    "AuditQuery",
    "AuditRecord",
    "AuditRecordBuilder",
    "AuditSnapshotRecorder",
    "AuditStore",
    "EntityIdResolver",
    "extract_entity_type",
]
