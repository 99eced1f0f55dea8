"""Bounded version archive.

Snapshots are checkpoints: taken on explicit request and right before a
restore, never implicitly on every edit. At most VERSION_RETENTION_LIMIT are
kept per note; the oldest are evicted in the same transaction as the insert.
"""

from __future__ import annotations

import logging
import uuid

from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.errors import NotFoundError
from notes_backend.models import utc_now
from notes_backend.models_notes import Note, NoteVersion
from notes_backend.repositories import versions_repo
from notes_backend.services import access_service
from notes_backend.services.note_writes import run_note_write

logger = logging.getLogger(__name__)


def _retention_limit() -> int:
    return max(1, int(settings.version_retention_limit))


async def _append_snapshot(session: AsyncSession, *, note: Note, author_id: int) -> NoteVersion:
    # Caller holds the note claim, so count/max/evict/insert see a stable history.
    cap = _retention_limit()
    # Read before evicting; numbers never repeat even when eviction empties the history.
    next_number = await versions_repo.max_version_number(session, note_id=note.id) + 1
    count = await versions_repo.count_versions(session, note_id=note.id)
    if count >= cap:
        evict = await versions_repo.list_oldest_versions(
            session, note_id=note.id, limit=count - cap + 1
        )
        for old in evict:
            await session.delete(old)
        logger.debug(
            "evicting versions note_id=%s numbers=%s",
            note.id,
            [v.version_number for v in evict],
        )

    version = NoteVersion(
        id=str(uuid.uuid4()),
        note_id=note.id,
        title=note.title,
        body=note.body,
        tags_json=list(note.tags_json or []),
        version_number=next_number,
        author_user_id=author_id,
        created_at=utc_now(),
    )
    session.add(version)
    return version


async def create_snapshot(*, session: AsyncSession, user_id: int, note_id: str) -> NoteVersion:
    async def _unit(note: Note) -> NoteVersion:
        await access_service.require_write(session, note=note, user_id=user_id)
        return await _append_snapshot(session, note=note, author_id=user_id)

    return await run_note_write(session, note_id=note_id, unit=_unit, op="create_snapshot")


async def list_versions(
    *, session: AsyncSession, user_id: int, note_id: str
) -> list[NoteVersion]:
    await access_service.load_readable_note(session, note_id=note_id, user_id=user_id)
    return await versions_repo.list_versions(session, note_id=note_id, limit=_retention_limit())


async def get_version(
    *, session: AsyncSession, user_id: int, note_id: str, version_id: str
) -> NoteVersion:
    await access_service.load_readable_note(session, note_id=note_id, user_id=user_id)
    version = await versions_repo.get_version(session, note_id=note_id, version_id=version_id)
    if version is None:
        raise NotFoundError("version not found")
    return version


async def restore_version(
    *, session: AsyncSession, user_id: int, note_id: str, version_id: str
) -> Note:
    """Owner only. Snapshot the current state, then copy title/body/tags back.

    Flags, attachments, reminder and sharing are left untouched.
    """

    async def _unit(note: Note) -> Note:
        access_service.require_owner(note, user_id=user_id, action="restore versions")
        target = await versions_repo.get_version(session, note_id=note.id, version_id=version_id)
        if target is None:
            raise NotFoundError("version not found")

        # Copy before the pre-restore snapshot can evict the target.
        title, body, tags = target.title, target.body, list(target.tags_json or [])
        await _append_snapshot(session, note=note, author_id=user_id)

        note.title = title
        note.body = body
        note.tags_json = tags
        note.updated_at = utc_now()
        session.add(note)
        return note

    note = await run_note_write(session, note_id=note_id, unit=_unit, op="restore_version")
    logger.info("note restored note_id=%s version_id=%s", note_id, version_id)
    return note
