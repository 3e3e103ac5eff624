"""Unit tests for RabbitMQEventConsumer (mocked, no aio-pika required)."""
from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from workforce_audit.adapters.rabbitmq import (
    ConsumerState,
    RabbitMQConnection,
    RabbitMQEventConsumer,
)
from workforce_audit.adapters.rabbitmq.consumer import (
    DEATH_REASON_HEADER,
    ORIGINAL_ROUTING_KEY_HEADER,
    RETRY_COUNT_HEADER,
    retry_count,
)
from workforce_audit.kernel.errors import EntityResolutionError
from workforce_audit.kernel.messaging import EventEnvelope

_PATCH_TARGET = "workforce_audit.adapters.rabbitmq.connection._require_aio_pika"

_BODY = json.dumps(
    {
        "EventId": "e-1",
        "EventType": "employee.created",
        "Timestamp": "2026-01-01T12:00:00Z",
        "Data": {"EmployeeId": "E1"},
    }
).encode()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_mock_aio_pika() -> SimpleNamespace:
    exchange = MagicMock()

    default_exchange = MagicMock()
    default_exchange.publish = AsyncMock()

    queue = MagicMock()
    queue.bind = AsyncMock()
    queue.consume = AsyncMock(return_value="ctag-1")
    queue.cancel = AsyncMock()

    channel = MagicMock()
    channel.is_closed = False
    channel.default_exchange = default_exchange
    channel.declare_exchange = AsyncMock(return_value=exchange)
    channel.declare_queue = AsyncMock(return_value=queue)
    channel.set_qos = AsyncMock()
    channel.close = AsyncMock()

    connection = MagicMock()
    connection.is_closed = False
    connection.channel = AsyncMock(return_value=channel)
    connection.close = AsyncMock()

    aio_pika = MagicMock()
    aio_pika.connect_robust = AsyncMock(return_value=connection)
    aio_pika.Message = MagicMock(side_effect=lambda **kw: SimpleNamespace(**kw))
    aio_pika.DeliveryMode.PERSISTENT = "persistent"

    return SimpleNamespace(
        module=aio_pika,
        connection=connection,
        channel=channel,
        exchange=exchange,
        default_exchange=default_exchange,
        queue=queue,
    )


def _incoming(
    body: bytes = _BODY,
    *,
    routing_key: str = "employee.created",
    headers: dict[str, Any] | None = None,
) -> MagicMock:
    message = MagicMock()
    message.body = body
    message.routing_key = routing_key
    message.headers = headers or {}
    message.message_id = "e-1"
    message.content_type = "application/json"
    message.ack = AsyncMock()
    message.nack = AsyncMock()
    return message


class _ConsumerTestBase:
    max_retries: int | None = 5

    def setup_method(self) -> None:
        self.mocks = _make_mock_aio_pika()
        self._patcher = patch(_PATCH_TARGET, return_value=self.mocks.module)
        self._patcher.start()
        self.handler = AsyncMock(return_value=None)
        self.connection = RabbitMQConnection()
        self.consumer = RabbitMQEventConsumer(
            self.connection,
            self.handler,
            max_retries=self.max_retries,
        )

    def teardown_method(self) -> None:
        self._patcher.stop()

    def _republished(self) -> tuple[Any, str]:
        call = self.mocks.default_exchange.publish.call_args
        return call.args[0], call.kwargs["routing_key"]


# ===========================================================================
# Lifecycle
# ===========================================================================


class TestConsumerLifecycle(_ConsumerTestBase):
    def test_initial_state_is_idle(self) -> None:
        assert self.consumer.state is ConsumerState.IDLE

    def test_start_declares_topology(self) -> None:
        asyncio.run(self.consumer.start())
        self.mocks.channel.set_qos.assert_awaited_once_with(prefetch_count=10)
        self.mocks.channel.declare_exchange.assert_awaited_once()
        self.mocks.channel.declare_queue.assert_any_await("audit.queue", durable=True)
        self.mocks.channel.declare_queue.assert_any_await("audit.queue.dlq", durable=True)
        self.mocks.queue.bind.assert_awaited_once_with(self.mocks.exchange, routing_key="#")
        self.mocks.queue.consume.assert_awaited_once_with(self.consumer.handle_message, no_ack=False)
        assert self.consumer.state is ConsumerState.CONSUMING

    def test_binds_every_routing_key(self) -> None:
        consumer = RabbitMQEventConsumer(
            self.connection,
            self.handler,
            routing_keys=["employee.*", "leave.request.#"],
        )
        asyncio.run(consumer.start())
        keys = [c.kwargs["routing_key"] for c in self.mocks.queue.bind.await_args_list]
        assert keys == ["employee.*", "leave.request.#"]

    def test_empty_bindings_rejected(self) -> None:
        with pytest.raises(ValueError):
            RabbitMQEventConsumer(self.connection, self.handler, routing_keys=[])

    def test_custom_dead_letter_queue(self) -> None:
        consumer = RabbitMQEventConsumer(self.connection, self.handler, dead_letter_queue="audit.poison")
        assert consumer.dead_letter_queue == "audit.poison"

    def test_start_twice_is_noop(self) -> None:
        asyncio.run(self.consumer.start())
        asyncio.run(self.consumer.start())
        self.mocks.queue.consume.assert_awaited_once()

    def test_stop_cancels_and_closes(self) -> None:
        asyncio.run(self.consumer.start())
        asyncio.run(self.consumer.stop())
        self.mocks.queue.cancel.assert_awaited_once_with("ctag-1")
        self.mocks.channel.close.assert_awaited_once()
        self.mocks.connection.close.assert_awaited_once()
        assert self.consumer.state is ConsumerState.STOPPED

    def test_stop_is_idempotent(self) -> None:
        asyncio.run(self.consumer.start())
        asyncio.run(self.consumer.stop())
        asyncio.run(self.consumer.stop())
        self.mocks.queue.cancel.assert_awaited_once()

    def test_stop_before_start(self) -> None:
        asyncio.run(self.consumer.stop())
        assert self.consumer.state is ConsumerState.STOPPED
        self.mocks.connection.close.assert_not_called()

    def test_shared_connection_is_not_closed(self) -> None:
        consumer = RabbitMQEventConsumer(self.connection, self.handler, owns_connection=False)
        asyncio.run(consumer.start())
        asyncio.run(consumer.stop())
        self.mocks.connection.close.assert_not_called()

    def test_stop_waits_for_in_flight_delivery(self) -> None:
        order: list[str] = []
        release = asyncio.Event()

        async def slow_handler(envelope: EventEnvelope) -> None:
            await release.wait()

        message = _incoming()
        message.ack = AsyncMock(side_effect=lambda: order.append("ack"))
        self.mocks.channel.close = AsyncMock(side_effect=lambda: order.append("close"))
        consumer = RabbitMQEventConsumer(self.connection, slow_handler)

        async def run() -> None:
            await consumer.start()
            delivery = asyncio.create_task(consumer.handle_message(message))
            await asyncio.sleep(0)
            stopping = asyncio.create_task(consumer.stop())
            await asyncio.sleep(0.01)
            assert order == []
            release.set()
            await asyncio.gather(delivery, stopping)

        asyncio.run(run())
        assert order == ["ack", "close"]
        assert consumer.state is ConsumerState.STOPPED

    def test_stop_gives_up_on_hung_delivery(self) -> None:
        async def hung_handler(envelope: EventEnvelope) -> None:
            await asyncio.Event().wait()

        message = _incoming()
        consumer = RabbitMQEventConsumer(
            self.connection,
            hung_handler,
            processing_timeout=None,
            drain_timeout=0.01,
        )

        async def run() -> None:
            await consumer.start()
            delivery = asyncio.create_task(consumer.handle_message(message))
            await asyncio.sleep(0)
            await consumer.stop()
            delivery.cancel()

        with patch("workforce_audit.adapters.rabbitmq.consumer.logger") as log:
            asyncio.run(run())
        self.mocks.channel.close.assert_awaited_once()
        message.ack.assert_not_called()
        assert consumer.state is ConsumerState.STOPPED
        events = [c.args[0] for c in log.warning.call_args_list]
        assert "consumer_drain_timeout" in events


class TestConsumerWithoutRetryCeilingTopology(_ConsumerTestBase):
    max_retries = None

    def test_no_dead_letter_queue_declared(self) -> None:
        asyncio.run(self.consumer.start())
        self.mocks.channel.declare_queue.assert_awaited_once_with("audit.queue", durable=True)


# ===========================================================================
# Message handling
# ===========================================================================


class TestConsumerHandleMessage(_ConsumerTestBase):
    def setup_method(self) -> None:
        super().setup_method()
        asyncio.run(self.consumer.start())

    def test_success_acks(self) -> None:
        message = _incoming()
        asyncio.run(self.consumer.handle_message(message))
        message.ack.assert_awaited_once()
        message.nack.assert_not_called()
        self.mocks.default_exchange.publish.assert_not_called()

    def test_handler_receives_envelope(self) -> None:
        asyncio.run(self.consumer.handle_message(_incoming()))
        [envelope] = self.handler.await_args.args
        assert isinstance(envelope, EventEnvelope)
        assert envelope.event_id == "e-1"
        assert envelope.event_type == "employee.created"
        assert envelope.data == {"EmployeeId": "E1"}

    def test_missing_event_type_uses_delivery_routing_key(self) -> None:
        body = json.dumps({"EventId": "e-2", "Data": {}}).encode()
        asyncio.run(self.consumer.handle_message(_incoming(body, routing_key="task.updated")))
        [envelope] = self.handler.await_args.args
        assert envelope.event_type == "task.updated"

    def test_retried_message_keeps_original_routing_key(self) -> None:
        body = json.dumps({"EventId": "e-2", "Data": {}}).encode()
        message = _incoming(
            body,
            routing_key="audit.queue",
            headers={ORIGINAL_ROUTING_KEY_HEADER: "task.updated", RETRY_COUNT_HEADER: 1},
        )
        asyncio.run(self.consumer.handle_message(message))
        [envelope] = self.handler.await_args.args
        assert envelope.event_type == "task.updated"

    def test_missing_event_id_gets_fallback(self) -> None:
        body = json.dumps({"EventType": "employee.created", "Data": {}}).encode()
        asyncio.run(self.consumer.handle_message(_incoming(body)))
        [envelope] = self.handler.await_args.args
        assert envelope.event_id

    def test_state_is_processing_while_handler_runs(self) -> None:
        seen: list[ConsumerState] = []

        async def handler(envelope: EventEnvelope) -> None:
            seen.append(self.consumer.state)

        self.consumer._handler = handler
        asyncio.run(self.consumer.handle_message(_incoming()))
        assert seen == [ConsumerState.PROCESSING]
        assert self.consumer.state is ConsumerState.CONSUMING

    def test_event_context_bound_while_handler_runs(self) -> None:
        seen: dict[str, Any] = {}

        async def handler(envelope: EventEnvelope) -> None:
            seen.update(structlog.contextvars.get_contextvars())

        self.consumer._handler = handler
        asyncio.run(self.consumer.handle_message(_incoming()))
        assert seen["event_id"] == "e-1"
        assert seen["event_type"] == "employee.created"

    def test_first_failure_is_republished_with_retry_header(self) -> None:
        self.handler.side_effect = RuntimeError("mongo down")
        message = _incoming()
        asyncio.run(self.consumer.handle_message(message))
        republished, routing_key = self._republished()
        assert routing_key == "audit.queue"
        assert republished.headers[RETRY_COUNT_HEADER] == 1
        assert republished.headers[ORIGINAL_ROUTING_KEY_HEADER] == "employee.created"
        assert republished.body == _BODY
        assert republished.delivery_mode == "persistent"
        message.ack.assert_awaited_once()
        message.nack.assert_not_called()

    def test_retry_count_increments(self) -> None:
        self.handler.side_effect = RuntimeError("still down")
        asyncio.run(self.consumer.handle_message(_incoming(headers={RETRY_COUNT_HEADER: 3})))
        republished, _ = self._republished()
        assert republished.headers[RETRY_COUNT_HEADER] == 4

    def test_ceiling_routes_to_dead_letter_queue(self) -> None:
        self.handler.side_effect = RuntimeError("poison")
        message = _incoming(headers={RETRY_COUNT_HEADER: 5})
        asyncio.run(self.consumer.handle_message(message))
        republished, routing_key = self._republished()
        assert routing_key == "audit.queue.dlq"
        assert republished.headers[RETRY_COUNT_HEADER] == 5
        assert "poison" in republished.headers[DEATH_REASON_HEADER]
        message.ack.assert_awaited_once()

    def test_death_reason_carries_error_code(self) -> None:
        self.handler.side_effect = EntityResolutionError("", entity_type="Unknown")
        asyncio.run(self.consumer.handle_message(_incoming(headers={RETRY_COUNT_HEADER: 5})))
        republished, _ = self._republished()
        assert republished.headers[DEATH_REASON_HEADER].startswith("[entity_resolution_failed]")

    def test_malformed_body_takes_failure_path(self) -> None:
        message = _incoming(b"not json")
        asyncio.run(self.consumer.handle_message(message))
        self.handler.assert_not_called()
        _, routing_key = self._republished()
        assert routing_key == "audit.queue"
        message.ack.assert_awaited_once()

    def test_timeout_takes_failure_path(self) -> None:
        async def slow(envelope: EventEnvelope) -> None:
            await asyncio.sleep(5)

        consumer = RabbitMQEventConsumer(self.connection, slow, processing_timeout=0.01)
        asyncio.run(consumer.start())
        message = _incoming()
        asyncio.run(consumer.handle_message(message))
        _, routing_key = self._republished()
        assert routing_key == "audit.queue"
        assert consumer.state is ConsumerState.CONSUMING

    def test_republish_failure_falls_back_to_nack(self) -> None:
        self.handler.side_effect = RuntimeError("boom")
        self.mocks.default_exchange.publish.side_effect = RuntimeError("channel closed")
        message = _incoming()
        asyncio.run(self.consumer.handle_message(message))
        message.nack.assert_awaited_once_with(requeue=True)
        message.ack.assert_not_called()


class TestConsumerWithoutRetryCeiling(_ConsumerTestBase):
    max_retries = None

    def setup_method(self) -> None:
        super().setup_method()
        asyncio.run(self.consumer.start())

    def test_failure_nacks_with_requeue(self) -> None:
        self.handler.side_effect = RuntimeError("mongo down")
        message = _incoming(headers={RETRY_COUNT_HEADER: 99})
        asyncio.run(self.consumer.handle_message(message))
        message.nack.assert_awaited_once_with(requeue=True)
        message.ack.assert_not_called()
        self.mocks.default_exchange.publish.assert_not_called()


class TestRetryCountHeader:
    @pytest.mark.parametrize(
        "headers, expected",
        [
            (None, 0),
            ({}, 0),
            ({RETRY_COUNT_HEADER: 2}, 2),
            ({RETRY_COUNT_HEADER: "3"}, 3),
            ({RETRY_COUNT_HEADER: b"4"}, 4),
            ({RETRY_COUNT_HEADER: "x"}, 0),
            ({RETRY_COUNT_HEADER: -1}, 0),
        ],
    )
    def test_parse(self, headers: dict[str, Any] | None, expected: int) -> None:
        assert retry_count(headers) == expected
