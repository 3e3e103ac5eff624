"""Unit tests for kernel clocks and the audit FakeClock."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta, timezone

import pytest

from workforce_audit.application.audit import AuditRecordBuilder
from workforce_audit.kernel.messaging import EventEnvelope
from workforce_audit.kernel.time import FrozenClock, SystemClock, utc_now
from workforce_audit.testing.fakes import (
    AUDIT_EPOCH,
    FakeClock,
    InMemoryAuditStore,
    InMemorySnapshotStore,
)


class TestClocks:
    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now().tzinfo is UTC
        assert utc_now().tzinfo is UTC

    def test_frozen_clock_advances(self) -> None:
        clock = FrozenClock(datetime(2026, 1, 1, tzinfo=UTC))
        clock.advance(minutes=5)
        assert clock.now() == datetime(2026, 1, 1, 0, 5, tzinfo=UTC)


class TestFakeClock:
    def test_pinned_to_audit_epoch(self) -> None:
        clock = FakeClock()
        assert clock.now() == AUDIT_EPOCH == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        assert clock.now() == AUDIT_EPOCH
        assert clock.reads == 2

    def test_step_moves_forward_per_read(self) -> None:
        clock = FakeClock(step=timedelta(seconds=1))
        assert [clock.now() for _ in range(3)] == [
            AUDIT_EPOCH,
            AUDIT_EPOCH + timedelta(seconds=1),
            AUDIT_EPOCH + timedelta(seconds=2),
        ]

    def test_start_is_normalised_to_utc(self) -> None:
        start = datetime(2026, 5, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        assert FakeClock(start).now() == datetime(2026, 5, 1, 7, 0, tzinfo=UTC)
        assert FakeClock(start).now().tzinfo is UTC

    def test_naive_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            FakeClock(datetime(2026, 1, 1))

    def test_successive_records_are_ordered(self) -> None:
        audit = InMemoryAuditStore()
        builder = AuditRecordBuilder(
            audit, InMemorySnapshotStore(), clock=FakeClock(step=timedelta(milliseconds=5))
        )
        for n in range(3):
            envelope = EventEnvelope(
                event_id=f"evt-{n}",
                event_type="employee.updated",
                timestamp=AUDIT_EPOCH,
                data={"EmployeeId": "E1"},
            )
            asyncio.run(builder.build(envelope))
        stamps = [r.timestamp for r in audit.records]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == 3
