from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from workforce_audit.observability.health.builtin import HealthCheck, HealthStatus

__all__ = ["HealthRegistry", "HealthReport"]


@dataclass
class HealthReport:
    results: dict[str, HealthStatus] = field(default_factory=dict)
    optional: frozenset[str] = frozenset()

    @property
    def overall(self) -> bool:
        """True while every critical check passes."""
        return all(s.healthy for name, s in self.results.items() if name not in self.optional)

    @property
    def degraded(self) -> bool:
        return any(not s.healthy for name, s in self.results.items() if name in self.optional)

    @property
    def failing(self) -> list[str]:
        return sorted(name for name, s in self.results.items() if not s.healthy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.overall,
            "degraded": self.degraded,
            "checks": {
                name: {
                    "healthy": s.healthy,
                    "critical": name not in self.optional,
                    "detail": s.detail,
                    "latency_ms": round(s.latency_ms, 2),
                }
                for name, s in self.results.items()
            },
        }


class HealthRegistry:
    """Runs the worker's dependency checks concurrently.

    A check that raises, or does not answer within *timeout* seconds, is
    reported unhealthy; one stuck backend never delays the others.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self._checks: dict[str, HealthCheck] = {}
        self._timeout = timeout

    def register(self, check: HealthCheck) -> None:
        if check.name in self._checks:
            raise ValueError(f"health check '{check.name}' is already registered")
        self._checks[check.name] = check

    async def _run_one(self, check: HealthCheck) -> HealthStatus:
        try:
            return await asyncio.wait_for(check.timed_check(), timeout=self._timeout)
        except TimeoutError:
            return HealthStatus.down(f"timed out after {self._timeout}s")
        except Exception as exc:  # noqa: BLE001
            return HealthStatus.down("exception", exc)

    async def run_all(self) -> HealthReport:
        checks = list(self._checks.values())
        statuses = await asyncio.gather(*(self._run_one(c) for c in checks))
        return HealthReport(
            results={c.name: s for c, s in zip(checks, statuses)},
            optional=frozenset(c.name for c in checks if not c.critical),
        )
