"""RabbitMQ adapter – RabbitMQEventConsumer."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from enum import Enum
from typing import Any

from workforce_audit.adapters.rabbitmq.connection import RabbitMQConnection
from workforce_audit.kernel.errors import BaseError
from workforce_audit.kernel.messaging import EnvelopeHandler, EventConsumer, EventEnvelope
from workforce_audit.observability.logging import bound_event_context, get_logger

logger = get_logger(__name__)

RETRY_COUNT_HEADER = "x-retry-count"
DEATH_REASON_HEADER = "x-death-reason"
ORIGINAL_ROUTING_KEY_HEADER = "x-original-routing-key"

_MAX_REASON_LENGTH = 512


class ConsumerState(str, Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    CONSUMING = "consuming"
    PROCESSING = "processing"
    STOPPED = "stopped"


def retry_count(headers: dict[str, Any] | None) -> int:
    """Return the ``x-retry-count`` header as an int (0 when absent or unreadable)."""
    if not headers:
        return 0
    raw = headers.get(RETRY_COUNT_HEADER)
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        return 0


class RabbitMQEventConsumer(EventConsumer):
    """Consume event envelopes from a durable queue bound to the topic exchange.

    Lifecycle::

        IDLE -> CONNECTED -> CONSUMING <-> PROCESSING
                                 |
                               stop() -> STOPPED

    Each delivery is decoded into an :class:`EventEnvelope` and passed to
    *handler*.  Success acks the message.  On failure:

    * ``max_retries=None`` nacks with requeue (unbounded redelivery);
    * otherwise the message is republished to the queue with an incremented
      ``x-retry-count`` header until the ceiling is reached, after which it
      goes to the dead-letter queue.  The original delivery is acked in both
      cases.

    Several consumers may share *queue_name* (competing consumers).  Delivery
    is at-least-once; the handler must be idempotent.

    :meth:`stop` cancels the subscription first, then waits up to
    *drain_timeout* seconds for in-flight deliveries to settle before the
    channel is closed.
    """

    def __init__(
        self,
        connection: RabbitMQConnection,
        handler: EnvelopeHandler,
        *,
        queue_name: str = "audit.queue",
        routing_keys: Sequence[str] = ("#",),
        prefetch_count: int = 10,
        max_retries: int | None = 5,
        dead_letter_queue: str | None = None,
        processing_timeout: float | None = 30.0,
        drain_timeout: float = 10.0,
        owns_connection: bool = True,
    ) -> None:
        if not routing_keys:
            raise ValueError("at least one routing key binding is required")
        self._connection = connection
        self._handler = handler
        self._queue_name = queue_name
        self._routing_keys = tuple(routing_keys)
        self._prefetch_count = prefetch_count
        self._max_retries = max_retries
        self._dead_letter_queue = dead_letter_queue or f"{queue_name}.dlq"
        self._timeout = processing_timeout
        self._drain_timeout = drain_timeout
        self._owns_connection = owns_connection

        self._state = ConsumerState.IDLE
        self._channel: Any = None
        self._queue: Any = None
        self._consumer_tag: str | None = None
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def dead_letter_queue(self) -> str:
        return self._dead_letter_queue

    async def start(self) -> None:
        if self._state in (ConsumerState.CONSUMING, ConsumerState.PROCESSING):
            return
        await self._connection.connect()
        self._state = ConsumerState.CONNECTED

        self._channel = await self._connection.channel()
        await self._channel.set_qos(prefetch_count=self._prefetch_count)
        exchange = await self._connection.declare_exchange(self._channel)
        self._queue = await self._channel.declare_queue(self._queue_name, durable=True)
        for routing_key in self._routing_keys:
            await self._queue.bind(exchange, routing_key=routing_key)
        if self._max_retries is not None:
            await self._channel.declare_queue(self._dead_letter_queue, durable=True)

        self._consumer_tag = await self._queue.consume(self.handle_message, no_ack=False)
        self._state = ConsumerState.CONSUMING
        logger.info(
            "consumer_started",
            queue=self._queue_name,
            routing_keys=list(self._routing_keys),
            state=self._state.value,
        )

    async def stop(self) -> None:
        if self._state in (ConsumerState.IDLE, ConsumerState.STOPPED):
            self._state = ConsumerState.STOPPED
            return
        if self._queue is not None and self._consumer_tag is not None:
            try:
                await self._queue.cancel(self._consumer_tag)
            except Exception as exc:  # noqa: BLE001
                logger.warning("consumer_cancel_failed", queue=self._queue_name, error=repr(exc))
        await self._drain()
        if self._channel is not None and not self._channel.is_closed:
            await self._channel.close()
        if self._owns_connection:
            await self._connection.close()
        self._channel = None
        self._queue = None
        self._consumer_tag = None
        self._state = ConsumerState.STOPPED
        logger.info("consumer_stopped", queue=self._queue_name, state=self._state.value)

    async def _drain(self) -> None:
        """Wait, at most ``drain_timeout`` seconds, for in-flight deliveries to settle."""
        if self._idle.is_set():
            return
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=self._drain_timeout)
        except TimeoutError:
            # unsettled deliveries are redelivered by the broker
            logger.warning(
                "consumer_drain_timeout",
                queue=self._queue_name,
                in_flight=self._in_flight,
                drain_timeout=self._drain_timeout,
            )

    async def handle_message(self, message: Any) -> None:
        """Process one delivery and settle it (ack, retry, dead-letter or nack)."""
        headers = dict(message.headers or {})
        routing_key = _text(headers.get(ORIGINAL_ROUTING_KEY_HEADER)) or message.routing_key or ""

        self._in_flight += 1
        self._idle.clear()
        self._state = ConsumerState.PROCESSING
        try:
            try:
                envelope = EventEnvelope.decode(message.body, routing_key=routing_key)
                with bound_event_context(event_id=envelope.event_id, event_type=envelope.event_type):
                    logger.info("event_received", routing_key=routing_key)
                    await asyncio.wait_for(self._handler(envelope), timeout=self._timeout)
            except Exception as exc:  # noqa: BLE001
                await self._on_failure(message, headers, routing_key, exc)
            else:
                await message.ack()
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()
                if self._state is ConsumerState.PROCESSING:
                    self._state = ConsumerState.CONSUMING

    async def _on_failure(
        self,
        message: Any,
        headers: dict[str, Any],
        routing_key: str,
        exc: BaseException,
    ) -> None:
        attempts = retry_count(headers)
        logger.error(
            "event_processing_failed",
            routing_key=routing_key,
            message_id=message.message_id,
            retry_count=attempts,
            **_error_fields(exc),
        )
        if self._max_retries is None:
            await message.nack(requeue=True)
            return

        headers[ORIGINAL_ROUTING_KEY_HEADER] = routing_key
        try:
            if attempts >= self._max_retries:
                headers[RETRY_COUNT_HEADER] = attempts
                headers[DEATH_REASON_HEADER] = _death_reason(exc)
                await self._republish(message, headers, self._dead_letter_queue)
                logger.warning(
                    "event_dead_lettered",
                    routing_key=routing_key,
                    dead_letter_queue=self._dead_letter_queue,
                    retry_count=attempts,
                )
            else:
                headers[RETRY_COUNT_HEADER] = attempts + 1
                await self._republish(message, headers, self._queue_name)
        except Exception as republish_exc:  # noqa: BLE001
            logger.error("event_requeue_failed", routing_key=routing_key, error=repr(republish_exc))
            await message.nack(requeue=True)
            return
        await message.ack()

    async def _republish(self, message: Any, headers: dict[str, Any], queue: str) -> None:
        await self._channel.default_exchange.publish(
            self._connection.build_message(
                message.body,
                message_id=message.message_id,
                headers=headers,
                content_type=message.content_type or "application/json",
            ),
            routing_key=queue,
        )


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value if isinstance(value, str) else ""


def _error_fields(exc: BaseException) -> dict[str, Any]:
    if isinstance(exc, BaseError):
        return exc.log_fields()
    return {"error": repr(exc)}


def _death_reason(exc: BaseException) -> str:
    reason = str(exc) if isinstance(exc, BaseError) else repr(exc)
    return reason[:_MAX_REASON_LENGTH]


__all__ = [
    "DEATH_REASON_HEADER",
    "ORIGINAL_ROUTING_KEY_HEADER",
    "RETRY_COUNT_HEADER",
    "ConsumerState",
    "RabbitMQEventConsumer",
    "retry_count",
]
