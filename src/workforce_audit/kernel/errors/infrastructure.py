"""Infrastructure errors – cache, broker and document-store failures."""

from __future__ import annotations

from typing import Any

from workforce_audit.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class ConnectionError(InfrastructureError):  # noqa: A001
    """Failed to connect to an external resource (broker, cache, database)."""

    default_code = "connection_error"

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not connect to '{resource}'", **kwargs)
        self.resource = resource


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize a payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


class SnapshotWriteError(InfrastructureError):
    """A snapshot could not be written to the snapshot store.

    Callers must not publish the corresponding event: the consumer would
    never see the missing snapshot.
    """

    default_code = "snapshot_write_failed"

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(f"Failed to write snapshot '{key}'", **kwargs)
        self.key = key


class PublishError(InfrastructureError):
    """An event could not be handed to the message broker."""

    default_code = "publish_failed"

    def __init__(self, routing_key: str, event_id: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to publish event '{event_id}' with routing key '{routing_key}'",
            detail={"routing_key": routing_key, "event_id": event_id},
            **kwargs,
        )
        self.routing_key = routing_key
        self.event_id = event_id


class DuplicateAuditRecordError(InfrastructureError):
    """An audit record for the event id already exists in the audit store."""

    default_code = "duplicate_audit_record"

    def __init__(self, event_id: str, **kwargs: Any) -> None:
        super().__init__(f"Audit record for event '{event_id}' already exists", **kwargs)
        self.event_id = event_id


__all__ = [
    "ConnectionError",
    "DuplicateAuditRecordError",
    "InfrastructureError",
    "PublishError",
    "SerializationError",
    "SnapshotWriteError",
]
