"""Observability – get_logger helper and event-scoped log context."""
from __future__ import annotations

import contextlib
from collections.abc import Iterator
from typing import Any

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


@contextlib.contextmanager
def bound_event_context(**values: Any) -> Iterator[None]:
    """Bind *values* (``event_id``, ``event_type`` …) for the enclosed block.

    Every log line emitted inside the block, from any module, carries the
    bound fields.
    """
    tokens = structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


__all__ = ["bound_event_context", "get_logger"]
