"""Kernel messaging – the event envelope and its wire codec.

Wire form (message body)::

    {
      "EventId": "<string, usually UUID>",
      "EventType": "<dot.delimited.routing.key>",
      "Timestamp": "<ISO-8601 UTC>",
      "Data": { ... }
    }
"""
from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from workforce_audit.kernel.errors import SerializationError
from workforce_audit.kernel.values import to_json

EVENT_ID_FIELD = "EventId"
EVENT_TYPE_FIELD = "EventType"
TIMESTAMP_FIELD = "Timestamp"
DATA_FIELD = "Data"


def new_event_id() -> str:
    return str(uuid4())


@dataclasses.dataclass(frozen=True)
class EventEnvelope:
    """One published domain mutation; immutable after publish."""

    event_id: str
    event_type: str
    timestamp: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        return {
            EVENT_ID_FIELD: self.event_id,
            EVENT_TYPE_FIELD: self.event_type,
            TIMESTAMP_FIELD: _format_timestamp(self.timestamp),
            DATA_FIELD: self.data,
        }

    def encode(self) -> bytes:
        """Serialize to the UTF-8 JSON message body."""
        return to_json(self.to_wire()).encode("utf-8")

    @classmethod
    def from_wire(cls, raw: Mapping[str, Any], *, routing_key: str = "") -> "EventEnvelope":
        """Build an envelope from a decoded wire mapping.

        A missing or malformed ``EventId`` is replaced by a fresh id instead of
        rejecting the message; a missing ``EventType`` falls back to the
        delivery *routing_key*; an unreadable ``Timestamp`` to the current time.
        """
        event_type = raw.get(EVENT_TYPE_FIELD)
        if not isinstance(event_type, str) or not event_type.strip():
            event_type = routing_key
        return cls(
            event_id=_coerce_event_id(raw.get(EVENT_ID_FIELD)),
            event_type=event_type.strip(),
            timestamp=_parse_timestamp(raw.get(TIMESTAMP_FIELD)),
            data=raw.get(DATA_FIELD),
        )

    @classmethod
    def decode(cls, body: bytes | str, *, routing_key: str = "") -> "EventEnvelope":
        """Parse a message body.

        Raises:
            SerializationError: the body is not a JSON object.
        """
        try:
            raw = json.loads(body)
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                "Message body is not valid JSON", payload_type="envelope", cause=exc
            ) from exc
        if not isinstance(raw, dict):
            raise SerializationError(
                f"Envelope must be a JSON object, got {type(raw).__name__}",
                payload_type="envelope",
            )
        return cls.from_wire(raw, routing_key=routing_key)


def _coerce_event_id(value: Any) -> str:
    if isinstance(value, bool):
        return new_event_id()
    if isinstance(value, int):
        return str(value)
    # must equal the id in the producer's snapshot keys
    if isinstance(value, str) and value.strip():
        return value
    return new_event_id()


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(UTC)
    else:
        return datetime.now(UTC)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


__all__ = [
    "DATA_FIELD",
    "EVENT_ID_FIELD",
    "EVENT_TYPE_FIELD",
    "TIMESTAMP_FIELD",
    "EventEnvelope",
    "new_event_id",
]
