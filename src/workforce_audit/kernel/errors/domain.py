"""Domain errors – audit rules that cannot be satisfied."""

from __future__ import annotations

from typing import Any

from workforce_audit.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule is violated."""

    default_code = "domain_error"


class EntityResolutionError(DomainError):
    """The entity type or id of an event could not be determined.

    Only raised when the record builder runs in strict mode; the default
    permissive mode records ``"Unknown"`` / ``""`` instead.
    """

    default_code = "entity_resolution_failed"

    def __init__(
        self,
        event_type: str,
        *,
        entity_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Could not resolve entity for event type '{event_type}'",
            detail={"event_type": event_type, "entity_type": entity_type},
            **kwargs,
        )
        self.event_type = event_type
        self.entity_type = entity_type


__all__ = ["DomainError", "EntityResolutionError"]
