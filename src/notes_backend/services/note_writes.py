"""Per-note atomic read-modify-write.

Every mutation of a note (or of its grants, attachments, versions or link)
runs as one transaction that first claims the note by bumping its revision.
Two writers that loaded the same revision cannot both claim it; the loser's
transaction is rolled back and the whole unit is re-run against fresh state.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.errors import NotFoundError, UnavailableError
from notes_backend.models_notes import Note
from notes_backend.repositories import notes_repo

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrentNoteWriteError(Exception):
    def __init__(self, note_id: str) -> None:
        super().__init__(f"note {note_id} was modified concurrently")
        self.note_id = note_id


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except Exception:
        logger.debug("rollback failed", exc_info=True)


async def _run_once(
    session: AsyncSession, *, note_id: str, unit: Callable[[Note], Awaitable[T]]
) -> T:
    async def _body() -> T:
        note = await notes_repo.get_note(session, note_id=note_id)
        if note is None:
            raise NotFoundError("note not found")
        if not await notes_repo.claim_note(session, note_id=note_id, revision=note.revision):
            raise ConcurrentNoteWriteError(note_id)
        # Keep the loaded row in step with the claimed revision.
        note.revision = note.revision + 1
        return await unit(note)

    try:
        if session.in_transaction():
            result = await _body()
            await session.commit()
            return result

        async with session.begin():
            return await _body()
    except Exception:
        await _rollback_quietly(session)
        raise


async def run_note_write(
    session: AsyncSession,
    *,
    note_id: str,
    unit: Callable[[Note], Awaitable[T]],
    op: str,
) -> T:
    """Run `unit(note)` atomically against the latest state of the note.

    `unit` may raise domain errors; they abort the transaction and propagate.
    Losing the claim re-runs the unit up to NOTE_WRITE_MAX_ATTEMPTS times and
    then surfaces as UnavailableError (retryable).
    """
    attempts = max(1, int(settings.note_write_max_attempts))
    for attempt in range(1, attempts + 1):
        try:
            return await _run_once(session, note_id=note_id, unit=unit)
        except ConcurrentNoteWriteError:
            logger.info(
                "note write lost race op=%s note_id=%s attempt=%s/%s",
                op,
                note_id,
                attempt,
                attempts,
            )
        except (OperationalError, PoolTimeoutError) as exc:
            logger.warning(
                "note write storage failure op=%s note_id=%s attempt=%s/%s: %s",
                op,
                note_id,
                attempt,
                attempts,
                exc,
            )
    raise UnavailableError(
        "note write did not complete; retry",
        details={"note_id": note_id, "op": op},
    )
