"""MongoDB adapter – audit trail store.

Requires ``motor``.
"""

from workforce_audit.adapters.mongodb.audit_store import MongoAuditStore
from workforce_audit.adapters.mongodb.client import create_motor_client

__all__ = ["MongoAuditStore", "create_motor_client"]
