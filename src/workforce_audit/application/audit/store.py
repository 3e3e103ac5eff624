"""Application audit – AuditStore port and AuditQuery."""

from __future__ import annotations

import abc
import dataclasses
from datetime import datetime

from workforce_audit.application.audit.record import AuditRecord

DEFAULT_QUERY_LIMIT = 100


@dataclasses.dataclass(frozen=True)
class AuditQuery:
    """Filter for audit trail lookups.  ``None`` fields are not filtered on.

    ``start`` is inclusive and ``end`` exclusive.  Results are always ordered
    newest first.
    """

    entity_type: str | None = None
    entity_id: str | None = None
    event_type: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    limit: int = DEFAULT_QUERY_LIMIT

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("end must not be earlier than start")

    def matches(self, record: AuditRecord) -> bool:
        """Return True when *record* passes every filter set on this query."""
        if self.entity_type is not None and record.entity_type != self.entity_type:
            return False
        if self.entity_id is not None and record.entity_id != self.entity_id:
            return False
        if self.event_type is not None and record.event_type != self.event_type:
            return False
        if self.start is not None and record.timestamp < self.start:
            return False
        if self.end is not None and record.timestamp >= self.end:
            return False
        return True


class AuditStore(abc.ABC):
    """Port – append-only audit trail.

    Implementations must reject a second record for the same ``event_id``
    with :class:`~workforce_audit.kernel.errors.DuplicateAuditRecordError`.
    """

    @abc.abstractmethod
    async def insert(self, record: AuditRecord) -> None:
        """Persist *record*."""

    @abc.abstractmethod
    async def exists(self, event_id: str) -> bool:
        """Return True if a record for *event_id* was already stored."""

    @abc.abstractmethod
    async def get_by_event_id(self, event_id: str) -> AuditRecord | None: ...

    @abc.abstractmethod
    async def find(self, query: AuditQuery) -> list[AuditRecord]:
        """Return records matching *query*, newest first."""

    async def recent(self, limit: int = DEFAULT_QUERY_LIMIT) -> list[AuditRecord]:
        return await self.find(AuditQuery(limit=limit))

    async def by_entity_type(
        self, entity_type: str, limit: int = DEFAULT_QUERY_LIMIT
    ) -> list[AuditRecord]:
        return await self.find(AuditQuery(entity_type=entity_type, limit=limit))

    async def by_entity(
        self, entity_type: str, entity_id: str, limit: int = DEFAULT_QUERY_LIMIT
    ) -> list[AuditRecord]:
        return await self.find(
            AuditQuery(entity_type=entity_type, entity_id=entity_id, limit=limit)
        )

    async def by_event_type(
        self, event_type: str, limit: int = DEFAULT_QUERY_LIMIT
    ) -> list[AuditRecord]:
        return await self.find(AuditQuery(event_type=event_type, limit=limit))

    async def by_date_range(
        self, start: datetime, end: datetime, limit: int = DEFAULT_QUERY_LIMIT
    ) -> list[AuditRecord]:
        return await self.find(AuditQuery(start=start, end=end, limit=limit))


__all__ = ["DEFAULT_QUERY_LIMIT", "AuditQuery", "AuditStore"]
