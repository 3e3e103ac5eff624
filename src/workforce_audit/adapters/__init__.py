"""Adapters – Redis snapshot cache, RabbitMQ transport, MongoDB audit store."""
