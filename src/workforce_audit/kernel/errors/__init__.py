"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   └── EntityResolutionError
    ├── ApplicationError     (application.py)
    │   └── ConfigError      (workforce_audit.config.validation)
    └── InfrastructureError  (infrastructure.py)
        ├── ConnectionError
        ├── SerializationError
        ├── SnapshotWriteError
        ├── PublishError
        └── DuplicateAuditRecordError
"""

from workforce_audit.kernel.errors.application import ApplicationError
from workforce_audit.kernel.errors.base import BaseError
from workforce_audit.kernel.errors.domain import DomainError, EntityResolutionError
from workforce_audit.kernel.errors.infrastructure import (
    ConnectionError,
    DuplicateAuditRecordError,
    InfrastructureError,
    PublishError,
    SerializationError,
    SnapshotWriteError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConnectionError",
    "DomainError",
    "DuplicateAuditRecordError",
    "EntityResolutionError",
    "InfrastructureError",
    "PublishError",
    "SerializationError",
    "SnapshotWriteError",
]
