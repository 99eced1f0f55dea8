from __future__ import annotations

import asyncio
import logging

import pytest

from notes_backend.config import settings
from notes_backend.scheduler import ReminderScheduler
from notes_backend.services.reminders_service import SweepStats


@pytest.mark.anyio
async def test_scheduler_runs_sweeps_until_stopped() -> None:
    calls: list[int] = []

    async def _sweep() -> SweepStats:
        calls.append(1)
        return SweepStats()

    scheduler = ReminderScheduler(interval_seconds=0.01, sweep=_sweep)
    assert scheduler.start() is True
    # Second start is a no-op while running.
    assert scheduler.start() is False
    assert scheduler.running

    for _ in range(100):
        if len(calls) >= 3:
            break
        await asyncio.sleep(0.01)
    assert len(calls) >= 3

    await scheduler.stop()
    assert not scheduler.running
    seen = len(calls)
    await asyncio.sleep(0.05)
    assert len(calls) == seen

    # Stopping twice is harmless.
    await scheduler.stop()


@pytest.mark.anyio
async def test_scheduler_survives_crashing_sweep(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    calls: list[int] = []

    async def _sweep() -> SweepStats:
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return SweepStats(due=1, sent=1)

    scheduler = ReminderScheduler(interval_seconds=0.01, sweep=_sweep)
    scheduler.start()
    for _ in range(100):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert len(calls) >= 2
    assert any("reminder sweep crashed" in rec.getMessage() for rec in caplog.records)


@pytest.mark.anyio
async def test_stop_cancels_a_stuck_sweep() -> None:
    started = asyncio.Event()

    async def _stuck() -> SweepStats:
        started.set()
        await asyncio.sleep(60)
        return SweepStats()

    scheduler = ReminderScheduler(interval_seconds=1, sweep=_stuck, stop_timeout_seconds=0.05)
    scheduler.start()
    await asyncio.wait_for(started.wait(), timeout=1)
    await scheduler.stop()
    assert not scheduler.running


@pytest.mark.anyio
async def test_run_once_returns_stats() -> None:
    async def _sweep() -> SweepStats:
        return SweepStats(due=2, sent=1, failed=1)

    scheduler = ReminderScheduler(interval_seconds=60, sweep=_sweep)
    stats = await scheduler.run_once()
    assert stats is not None
    assert stats.to_dict() == {"due": 2, "sent": 1, "failed": 1, "skipped": 0}


@pytest.mark.anyio
async def test_app_lifespan_owns_the_scheduler(app_env) -> None:
    from notes_backend.main import app

    _ = app_env
    settings.reminder_scheduler_enabled = True
    settings.reminder_sweep_interval_seconds = 3600
    try:
        async with app.router.lifespan_context(app):
            scheduler = app.state.reminder_scheduler
            assert isinstance(scheduler, ReminderScheduler)
            assert scheduler.running
        assert not scheduler.running
    finally:
        settings.reminder_sweep_interval_seconds = 60.0

    settings.reminder_scheduler_enabled = False
    async with app.router.lifespan_context(app):
        assert not app.state.reminder_scheduler.running
