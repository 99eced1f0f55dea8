from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Final

from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.domain.sharing import Permission, normalize_tags, reminder_status_for
from notes_backend.errors import ForbiddenError, InvalidArgumentError
from notes_backend.integrations.storage.object_storage import ObjectStorage
from notes_backend.models import utc_now
from notes_backend.models_notes import Note, NoteAttachment
from notes_backend.repositories import attachments_repo, notes_repo
from notes_backend.services import access_service
from notes_backend.services.attachments_service import delete_objects_best_effort
from notes_backend.services.note_writes import run_note_write

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final = 200
MAX_BODY_LENGTH: Final = 50_000


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Distinguishes "field not sent" from an explicit null (clearing a reminder).
UNSET: Final = _Unset()


@dataclass(frozen=True)
class VisibleNote:
    note: Note
    permission: Permission
    is_owner: bool


def _clean_title(title: str) -> str:
    v = (title or "").strip()
    if not v:
        raise InvalidArgumentError("title is required")
    if len(v) > MAX_TITLE_LENGTH:
        raise InvalidArgumentError(f"title too long (max {MAX_TITLE_LENGTH} chars)")
    return v


def _clean_body(body: str) -> str:
    v = body or ""
    if len(v) > MAX_BODY_LENGTH:
        raise InvalidArgumentError(f"body too long (max {MAX_BODY_LENGTH} chars)")
    return v


def _clean_tags(tags: list[str]) -> list[str]:
    try:
        return normalize_tags(tags)
    except ValueError as exc:
        raise InvalidArgumentError(str(exc)) from exc


def _clean_reminder_at(value: datetime | None, *, now: datetime) -> datetime | None:
    if value is None:
        return None
    # Stored as UTC wall time; SQLite drops offsets.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    if value <= now:
        raise InvalidArgumentError("reminder_at must be in the future")
    return value


async def create_note(
    *,
    session: AsyncSession,
    user_id: int,
    title: str,
    body: str,
    tags: list[str],
) -> Note:
    now = utc_now()
    note = Note(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=_clean_title(title),
        body=_clean_body(body),
        tags_json=_clean_tags(tags),
        created_at=now,
        updated_at=now,
    )

    try:
        if session.in_transaction():
            session.add(note)
            await session.commit()
        else:
            async with session.begin():
                session.add(note)
    except Exception:
        await session.rollback()
        raise
    return note


async def list_notes(
    *,
    session: AsyncSession,
    user_id: int,
    archived: bool | None,
    tag: str | None,
    q: str | None,
    limit: int,
    offset: int,
) -> tuple[list[VisibleNote], int]:
    rows, total = await notes_repo.list_visible_notes(
        session,
        user_id=user_id,
        archived=archived,
        q=q,
        tag=tag,
        limit=limit,
        offset=offset,
    )

    items: list[VisibleNote] = []
    for note, grant in rows:
        is_owner = note.user_id == user_id
        if is_owner:
            permission = Permission.EDIT
        else:
            assert grant is not None
            permission = Permission(grant.permission)
        items.append(VisibleNote(note=note, permission=permission, is_owner=is_owner))
    return items, total


async def get_note(
    *, session: AsyncSession, user_id: int, note_id: str
) -> tuple[Note, Permission, list[NoteAttachment]]:
    note, permission = await access_service.load_readable_note(
        session, note_id=note_id, user_id=user_id
    )
    attachments = await attachments_repo.list_attachments_for_note(session, note_id=note_id)
    return note, permission, attachments


async def update_note(
    *,
    session: AsyncSession,
    user_id: int,
    note_id: str,
    title: str | None = None,
    body: str | None = None,
    tags: list[str] | None = None,
    pinned: bool | None = None,
    archived: bool | None = None,
    reminder_at: datetime | None | _Unset = UNSET,
) -> tuple[Note, Permission]:
    """Last-write-wins update.

    Content (title/body/tags) needs edit access; flags and the reminder are
    owner-only.
    """
    owner_fields = [
        name
        for name, value in (("pinned", pinned), ("archived", archived))
        if value is not None
    ]
    if not isinstance(reminder_at, _Unset):
        owner_fields.append("reminder_at")

    async def _unit(note: Note) -> tuple[Note, Permission]:
        permission = await access_service.require_write(session, note=note, user_id=user_id)
        if owner_fields and note.user_id != user_id:
            raise ForbiddenError(
                "only the owner can change " + ", ".join(owner_fields),
                details={"fields": owner_fields},
            )

        now = utc_now()
        if title is not None:
            note.title = _clean_title(title)
        if body is not None:
            note.body = _clean_body(body)
        if tags is not None:
            note.tags_json = _clean_tags(tags)
        if pinned is not None:
            note.pinned = bool(pinned)
        if archived is not None:
            note.archived = bool(archived)
        if not isinstance(reminder_at, _Unset):
            cleaned = _clean_reminder_at(reminder_at, now=now)
            note.reminder_at = cleaned
            note.reminder_status = reminder_status_for(cleaned).value

        note.updated_at = now
        session.add(note)
        return note, permission

    return await run_note_write(session, note_id=note_id, unit=_unit, op="update_note")


async def delete_note(
    *, session: AsyncSession, storage: ObjectStorage, user_id: int, note_id: str
) -> None:
    """Hard delete; grants, attachments and versions go in the same transaction.

    Stored attachment objects are removed after commit; failures there are
    logged and do not fail the deletion.
    """

    async def _unit(note: Note) -> list[str]:
        access_service.require_owner(note, user_id=user_id, action="delete this note")
        attachments = await attachments_repo.list_attachments_for_note(session, note_id=note.id)
        await notes_repo.delete_note_cascade(session, note_id=note.id)
        # The ORM row was removed by a bulk DELETE; keep the session from flushing it.
        session.expunge(note)
        return [a.storage_key for a in attachments]

    storage_keys = await run_note_write(session, note_id=note_id, unit=_unit, op="delete_note")
    logger.info("note deleted note_id=%s attachments=%s", note_id, len(storage_keys))
    await delete_objects_best_effort(storage, storage_keys)
