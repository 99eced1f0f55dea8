from __future__ import annotations

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.models_notes import NoteAttachment


async def list_attachments_for_note(
    session: AsyncSession, *, note_id: str
) -> list[NoteAttachment]:
    stmt = (
        select(NoteAttachment)
        .where(NoteAttachment.note_id == note_id)
        .order_by(col(NoteAttachment.created_at).asc(), col(NoteAttachment.id))
    )
    return list((await session.exec(stmt)).all())


async def get_attachment_for_note(
    session: AsyncSession, *, note_id: str, attachment_id: str
) -> NoteAttachment | None:
    stmt = (
        select(NoteAttachment)
        .where(NoteAttachment.note_id == note_id)
        .where(NoteAttachment.id == attachment_id)
    )
    return (await session.exec(stmt)).first()
