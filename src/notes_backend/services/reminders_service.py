"""Reminder sweep.

One sweep finds notes whose reminder is `pending` and due, dispatches a
notification to the owner and flips the status to `sent`. Each note is
handled on its own: a failed or slow dispatch leaves that reminder `pending`
for the next sweep and does not affect the others. The sweep never raises.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from notes_backend.config import settings
from notes_backend.db import session_scope
from notes_backend.integrations.notifications.dispatcher import (
    NotificationDispatcher,
    get_notification_dispatcher,
)
from notes_backend.models import assume_utc, utc_now
from notes_backend.repositories import notes_repo, users_repo

logger = logging.getLogger(__name__)

_BODY_EXCERPT_CHARS = 280


@dataclass
class SweepStats:
    due: int = 0
    sent: int = 0
    failed: int = 0
    # Due but not marked: owner gone, or the reminder changed while dispatching.
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"due": self.due, "sent": self.sent, "failed": self.failed, "skipped": self.skipped}


@dataclass(frozen=True)
class _DueReminder:
    note_id: str
    title: str
    body: str
    # Exactly as stored; used for the conditional pending -> sent update.
    reminder_at_raw: datetime
    owner_email: str | None
    owner_name: str | None


def build_reminder_payload(reminder: _DueReminder) -> dict[str, Any]:
    reminder_at = assume_utc(reminder.reminder_at_raw)
    assert reminder_at is not None
    reminder_at_iso = reminder_at.astimezone(timezone.utc).isoformat()
    return {
        "kind": "reminder",
        "dedupe_key": f"reminder:{reminder.note_id}:{reminder_at_iso}",
        "note_id": reminder.note_id,
        "title": reminder.title,
        "excerpt": reminder.body[:_BODY_EXCERPT_CHARS],
        "reminder_at": reminder_at_iso,
        "recipient_name": reminder.owner_name or "",
    }


async def _load_due(now: datetime) -> list[_DueReminder]:
    async with session_scope() as session:
        notes = await notes_repo.list_due_reminders(
            session, now=now, limit=max(1, int(settings.reminder_sweep_batch_size))
        )
        owners = await users_repo.get_users_by_ids(session, user_ids=[n.user_id for n in notes])
        out: list[_DueReminder] = []
        for note in notes:
            if note.reminder_at is None:
                continue
            owner = owners.get(note.user_id)
            active = owner is not None and owner.is_active
            out.append(
                _DueReminder(
                    note_id=note.id,
                    title=note.title,
                    body=note.body,
                    reminder_at_raw=note.reminder_at,
                    owner_email=owner.email if active and owner is not None else None,
                    owner_name=owner.name if owner is not None else None,
                )
            )
        return out


async def _mark_sent(reminder: _DueReminder) -> bool:
    async with session_scope() as session:
        marked = await notes_repo.mark_reminder_sent(
            session, note_id=reminder.note_id, reminder_at=reminder.reminder_at_raw
        )
        await session.commit()
        return marked


async def run_reminder_sweep(
    *,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> SweepStats:
    stats = SweepStats()
    sweep_now = now or utc_now()
    if sweep_now.tzinfo is not None:
        sweep_now = sweep_now.astimezone(timezone.utc)

    try:
        if dispatcher is None:
            dispatcher = get_notification_dispatcher()
        due = await _load_due(sweep_now)
    except Exception:
        logger.exception("reminder sweep could not start")
        return stats

    stats.due = len(due)
    timeout = float(settings.notification_timeout_seconds)
    for reminder in due:
        if not reminder.owner_email:
            stats.skipped += 1
            logger.info("reminder skipped, owner missing or disabled note_id=%s", reminder.note_id)
            continue

        try:
            await asyncio.wait_for(
                dispatcher.send(
                    recipient_email=reminder.owner_email,
                    payload=build_reminder_payload(reminder),
                ),
                timeout=timeout,
            )
        except Exception:
            stats.failed += 1
            logger.warning(
                "reminder dispatch failed note_id=%s; will retry next sweep",
                reminder.note_id,
                exc_info=True,
            )
            continue

        try:
            marked = await _mark_sent(reminder)
        except Exception:
            stats.failed += 1
            logger.warning(
                "reminder dispatched but status update failed note_id=%s",
                reminder.note_id,
                exc_info=True,
            )
            continue

        if marked:
            stats.sent += 1
        else:
            stats.skipped += 1
            logger.info("reminder changed during dispatch note_id=%s", reminder.note_id)

    if stats.due:
        logger.info("reminder sweep finished %s", stats.to_dict())
    return stats
