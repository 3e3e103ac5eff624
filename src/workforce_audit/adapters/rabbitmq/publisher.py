"""RabbitMQ adapter – RabbitMQEventPublisher."""
from __future__ import annotations

import asyncio
from typing import Any

from workforce_audit.adapters.rabbitmq.connection import RabbitMQConnection
from workforce_audit.kernel.errors import PublishError
from workforce_audit.kernel.messaging import (
    AuditEventType,
    EventEnvelope,
    EventPublisher,
    new_event_id,
    routing_key_for,
)
from workforce_audit.kernel.time import Clock, SystemClock
from workforce_audit.observability.logging import get_logger

logger = get_logger(__name__)


class RabbitMQEventPublisher(EventPublisher):
    """Publish domain events to the durable topic exchange.

    Ordering contract
    ~~~~~~~~~~~~~~~~~
    Callers must write the ``before`` / ``after`` snapshots for the event id
    *before* calling :meth:`publish`.  The publisher does not check this.

    Failure semantics
    ~~~~~~~~~~~~~~~~~
    Any failure to reach the broker raises :class:`PublishError`; a dropped
    publish would leave a mutation without an audit trail.

    Concurrency
    ~~~~~~~~~~~
    One channel is owned per publisher instance and AMQP channels are
    single-writer, so publishes are serialized with an ``asyncio.Lock``.
    """

    def __init__(self, connection: RabbitMQConnection, clock: Clock | None = None) -> None:
        self._connection = connection
        self._clock = clock or SystemClock()
        self._channel: Any = None
        self._exchange: Any = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        """Open the publishing channel and declare the exchange."""
        self._channel = await self._connection.channel()
        self._exchange = await self._connection.declare_exchange(self._channel)

    async def publish(
        self,
        event_type: AuditEventType | str,
        payload: Any,
        event_id: str | None = None,
    ) -> str:
        routing_key = routing_key_for(event_type)
        event_id = event_id or new_event_id()
        envelope = EventEnvelope(
            event_id=event_id,
            event_type=routing_key,
            timestamp=self._clock.now(),
            data=payload,
        )
        async with self._lock:
            try:
                body = envelope.encode()
                if self._exchange is None or self._channel is None or self._channel.is_closed:
                    await self.start()
                await self._exchange.publish(
                    self._connection.build_message(
                        body,
                        message_id=event_id,
                        timestamp=envelope.timestamp,
                    ),
                    routing_key=routing_key,
                )
            except Exception as exc:
                logger.error(
                    "event_publish_failed",
                    event_id=event_id,
                    routing_key=routing_key,
                    error=repr(exc),
                )
                raise PublishError(routing_key, event_id, cause=exc) from exc

        logger.debug("event_published", event_id=event_id, routing_key=routing_key)
        return event_id

    async def close(self) -> None:
        if self._channel is not None and not self._channel.is_closed:
            await self._channel.close()
        self._channel = None
        self._exchange = None


__all__ = ["RabbitMQEventPublisher"]
