from __future__ import annotations

import json
from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.domain.sharing import GrantStatus, ReminderStatus
from notes_backend.models_notes import Note, NoteAttachment, NoteShare, NoteVersion


async def get_note(session: AsyncSession, *, note_id: str) -> Note | None:
    return (await session.exec(select(Note).where(Note.id == note_id))).first()


async def get_note_by_share_token(session: AsyncSession, *, token_hmac: str) -> Note | None:
    stmt = select(Note).where(Note.share_token_hmac == token_hmac)
    return (await session.exec(stmt)).first()


async def claim_note(session: AsyncSession, *, note_id: str, revision: int) -> bool:
    """Bump the note revision iff it still equals `revision`.

    The UPDATE takes the row (or SQLite database) write lock, so two writers
    that loaded the same revision cannot both succeed.
    """
    table = SQLModel.metadata.tables["notes"]
    result = await session.exec(
        sa.update(table)
        .where(table.c.id == note_id)
        .where(table.c.revision == int(revision))
        .values(revision=table.c.revision + 1)
    )
    return int(result.rowcount or 0) == 1


def _like_contains(value: str) -> str:
    escaped = value.replace("!", "!!").replace("%", "!%").replace("_", "!_")
    return f"%{escaped}%"


async def list_visible_notes(
    session: AsyncSession,
    *,
    user_id: int,
    archived: bool | None,
    q: str | None,
    tag: str | None,
    limit: int,
    offset: int,
) -> tuple[list[tuple[Note, NoteShare | None]], int]:
    """One page of owned notes plus notes shared with the user (accepted grants only).

    Pinned first, then most recently updated. Returns (page, total matching).

    The tag filter matches the quoted element inside the stored JSON array,
    case-insensitively for ASCII tags (non-ASCII tags are stored \\u-escaped).
    """
    grant_join = sa.and_(
        cast(ColumnElement[bool], NoteShare.note_id == Note.id),
        cast(ColumnElement[bool], NoteShare.grantee_user_id == user_id),
        cast(ColumnElement[bool], NoteShare.status == GrantStatus.ACCEPTED.value),
    )
    stmt = (
        select(Note, NoteShare)
        .outerjoin(NoteShare, grant_join)
        .where(
            sa.or_(
                cast(ColumnElement[bool], Note.user_id == user_id),
                col(NoteShare.id).is_not(None),
            )
        )
    )
    if archived is not None:
        stmt = stmt.where(Note.archived == archived)
    needle = (q or "").strip().lower()
    if needle:
        pattern = _like_contains(needle)
        stmt = stmt.where(
            sa.or_(
                sa.func.lower(col(Note.title)).like(pattern, escape="!"),
                sa.func.lower(col(Note.body)).like(pattern, escape="!"),
            )
        )
    tag_key = (tag or "").strip().lower()
    if tag_key:
        stored = sa.func.lower(sa.cast(col(Note.tags_json), sa.Text))
        stmt = stmt.where(stored.like(_like_contains(json.dumps(tag_key)), escape="!"))

    ids = stmt.with_only_columns(col(Note.id)).subquery()
    total = int((await session.exec(sa.select(sa.func.count()).select_from(ids))).scalar_one())

    stmt = (
        stmt.order_by(col(Note.pinned).desc(), col(Note.updated_at).desc(), col(Note.id))
        .limit(int(limit))
        .offset(int(offset))
    )
    rows = (await session.exec(stmt)).all()
    return [(note, share) for note, share in rows], total


async def list_due_reminders(
    session: AsyncSession, *, now: datetime, limit: int
) -> list[Note]:
    stmt = (
        select(Note)
        .where(Note.reminder_status == ReminderStatus.PENDING.value)
        .where(col(Note.reminder_at).is_not(None))
        .where(col(Note.reminder_at) <= now)
        .order_by(col(Note.reminder_at).asc(), col(Note.id))
        .limit(int(limit))
    )
    return list((await session.exec(stmt)).all())


async def mark_reminder_sent(
    session: AsyncSession, *, note_id: str, reminder_at: datetime
) -> bool:
    """pending -> sent, only if nobody re-armed or cleared the reminder meanwhile."""
    table = SQLModel.metadata.tables["notes"]
    result = await session.exec(
        sa.update(table)
        .where(table.c.id == note_id)
        .where(table.c.reminder_status == ReminderStatus.PENDING.value)
        .where(table.c.reminder_at == reminder_at)
        .values(reminder_status=ReminderStatus.SENT.value)
    )
    return int(result.rowcount or 0) == 1


async def delete_note_cascade(session: AsyncSession, *, note_id: str) -> None:
    for model in (NoteShare, NoteAttachment, NoteVersion):
        table = SQLModel.metadata.tables[model.__tablename__]
        await session.exec(sa.delete(table).where(table.c.note_id == note_id))
    notes = SQLModel.metadata.tables["notes"]
    await session.exec(sa.delete(notes).where(notes.c.id == note_id))
