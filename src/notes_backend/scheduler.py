from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from notes_backend.services.reminders_service import SweepStats, run_reminder_sweep

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Runs the reminder sweep every `interval_seconds` as a background task.

    Owned by the application lifespan: `start()` once at startup (repeat calls
    are no-ops), `await stop()` at shutdown.
    """

    def __init__(
        self,
        *,
        interval_seconds: float,
        sweep: Callable[[], Awaitable[SweepStats]] | None = None,
        stop_timeout_seconds: float = 5.0,
    ) -> None:
        self._interval = max(0.01, float(interval_seconds))
        self._sweep = sweep or run_reminder_sweep
        self._stop_timeout = stop_timeout_seconds
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        if self.running:
            return False
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="reminder-scheduler")
        logger.info("reminder scheduler started interval=%ss", self._interval)
        return True

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(task, timeout=self._stop_timeout)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
        logger.info("reminder scheduler stopped")

    async def run_once(self) -> SweepStats | None:
        try:
            return await self._sweep()
        except Exception:
            # run_reminder_sweep does not raise; a custom sweep might.
            logger.exception("reminder sweep crashed")
            return None

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
