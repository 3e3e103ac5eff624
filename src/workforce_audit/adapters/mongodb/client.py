"""MongoDB adapter – motor client factory."""

from __future__ import annotations

from typing import Any


def _require_motor() -> Any:
    try:
        import motor.motor_asyncio as motor_asyncio  # type: ignore[import-untyped]
        return motor_asyncio
    except ImportError as exc:
        raise ImportError("Install 'motor' to use the MongoDB adapter") from exc


def create_motor_client(url: str, **kwargs: Any) -> Any:
    """Return an ``AsyncIOMotorClient`` that yields timezone-aware datetimes."""
    motor_asyncio = _require_motor()
    kwargs.setdefault("tz_aware", True)
    return motor_asyncio.AsyncIOMotorClient(url, **kwargs)


__all__ = ["create_motor_client"]
