"""Kernel messaging – publisher and handler ports."""
from __future__ import annotations

import abc
from typing import Any, Awaitable, Callable

from workforce_audit.kernel.messaging.envelope import EventEnvelope
from workforce_audit.kernel.messaging.events import AuditEventType

type EnvelopeHandler = Callable[[EventEnvelope], Awaitable[Any]]


class EventPublisher(abc.ABC):
    """Port: publish a domain event to the topic exchange.

    Callers must write every relevant snapshot *before* calling
    :meth:`publish`; publishing is the signal that triggers consumption.
    """

    @abc.abstractmethod
    async def publish(
        self,
        event_type: AuditEventType | str,
        payload: Any,
        event_id: str | None = None,
    ) -> str:
        """Publish and return the event id used."""
        ...


class EventConsumer(abc.ABC):
    """Port: subscribe to domain events."""

    @abc.abstractmethod
    async def start(self) -> None: ...

    @abc.abstractmethod
    async def stop(self) -> None: ...


__all__ = ["EnvelopeHandler", "EventConsumer", "EventPublisher"]
