"""Entry point: ``python -m workforce_audit``."""
from __future__ import annotations

import asyncio

from workforce_audit.worker import AuditWorker, WorkerSettings


def main() -> None:
    asyncio.run(AuditWorker(WorkerSettings.from_env()).run())


if __name__ == "__main__":
    main()
