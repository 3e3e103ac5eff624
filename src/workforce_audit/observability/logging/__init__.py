"""Observability – structured logging helpers."""
from workforce_audit.observability.logging.factory import JsonLoggerFactory
from workforce_audit.observability.logging.logger import bound_event_context, get_logger

__all__ = ["JsonLoggerFactory", "bound_event_context", "get_logger"]
