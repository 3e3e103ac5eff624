"""
workforce_audit – audit-trail pipeline for the workforce platform.

Import path convention::

    from workforce_audit.kernel.messaging import EventEnvelope, AuditEventType
    from workforce_audit.application.audit import AuditRecordBuilder
    from workforce_audit.adapters.rabbitmq import RabbitMQEventConsumer
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
