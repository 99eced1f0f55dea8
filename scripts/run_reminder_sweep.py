"""Run one reminder sweep and exit.

For deployments that prefer an external cron over the in-process scheduler
(set REMINDER_SCHEDULER_ENABLED=false on the API workers).

Usage:
    python scripts/run_reminder_sweep.py
"""

from __future__ import annotations

import asyncio
import json
import logging


async def _run() -> dict[str, int]:
    from notes_backend.db import dispose_engine
    from notes_backend.services.reminders_service import run_reminder_sweep

    try:
        stats = await run_reminder_sweep()
    finally:
        await dispose_engine()
    return stats.to_dict()


def main() -> int:
    from notes_backend.config import settings

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    result = asyncio.run(_run())
    print(json.dumps(result, sort_keys=True))
    return 0 if result["failed"] == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
