"""RabbitMQ adapter – owned connection, topic publisher and audit consumer.

Requires ``aio-pika``.
"""
from workforce_audit.adapters.rabbitmq.connection import RabbitMQConnection
from workforce_audit.adapters.rabbitmq.consumer import ConsumerState, RabbitMQEventConsumer
from workforce_audit.adapters.rabbitmq.publisher import RabbitMQEventPublisher

__all__ = ["ConsumerState", "RabbitMQConnection", "RabbitMQEventConsumer", "RabbitMQEventPublisher"]
