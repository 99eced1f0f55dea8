from __future__ import annotations

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.models import User
from notes_backend.models_notes import Note, NoteShare


async def get_grant(
    session: AsyncSession, *, note_id: str, grantee_user_id: int
) -> NoteShare | None:
    stmt = (
        select(NoteShare)
        .where(NoteShare.note_id == note_id)
        .where(NoteShare.grantee_user_id == grantee_user_id)
    )
    return (await session.exec(stmt)).first()


async def count_grants(session: AsyncSession, *, note_id: str) -> int:
    rows = (await session.exec(select(NoteShare.id).where(NoteShare.note_id == note_id))).all()
    return len(rows)


async def list_grants_for_note(
    session: AsyncSession, *, note_id: str
) -> list[tuple[NoteShare, User]]:
    stmt = (
        select(NoteShare, User)
        .join(User, col(User.id) == col(NoteShare.grantee_user_id))
        .where(NoteShare.note_id == note_id)
        .order_by(col(NoteShare.granted_at).asc(), col(NoteShare.id))
    )
    return [(share, user) for share, user in (await session.exec(stmt)).all()]


async def list_grants_for_grantee(
    session: AsyncSession, *, grantee_user_id: int, status: str
) -> list[tuple[NoteShare, Note, User]]:
    """Grants held by a user in the given status, with the note and its owner."""
    stmt = (
        select(NoteShare, Note, User)
        .join(Note, col(Note.id) == col(NoteShare.note_id))
        .join(User, col(User.id) == col(Note.user_id))
        .where(NoteShare.grantee_user_id == grantee_user_id)
        .where(NoteShare.status == status)
        .order_by(col(Note.updated_at).desc(), col(Note.id))
    )
    return [(share, note, owner) for share, note, owner in (await session.exec(stmt)).all()]
