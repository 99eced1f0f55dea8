from __future__ import annotations

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.models_notes import NoteVersion


async def count_versions(session: AsyncSession, *, note_id: str) -> int:
    stmt = select(func.count()).select_from(NoteVersion).where(NoteVersion.note_id == note_id)
    return int((await session.exec(stmt)).one() or 0)


async def max_version_number(session: AsyncSession, *, note_id: str) -> int:
    stmt = select(func.max(NoteVersion.version_number)).where(NoteVersion.note_id == note_id)
    value = (await session.exec(stmt)).one()
    return int(value or 0)


async def list_versions(session: AsyncSession, *, note_id: str, limit: int) -> list[NoteVersion]:
    # Newest first.
    stmt = (
        select(NoteVersion)
        .where(NoteVersion.note_id == note_id)
        .order_by(col(NoteVersion.created_at).desc(), col(NoteVersion.version_number).desc())
        .limit(int(limit))
    )
    return list((await session.exec(stmt)).all())


async def list_oldest_versions(
    session: AsyncSession, *, note_id: str, limit: int
) -> list[NoteVersion]:
    stmt = (
        select(NoteVersion)
        .where(NoteVersion.note_id == note_id)
        .order_by(col(NoteVersion.created_at).asc(), col(NoteVersion.version_number).asc())
        .limit(int(limit))
    )
    return list((await session.exec(stmt)).all())


async def get_version(
    session: AsyncSession, *, note_id: str, version_id: str
) -> NoteVersion | None:
    stmt = (
        select(NoteVersion)
        .where(NoteVersion.note_id == note_id)
        .where(NoteVersion.id == version_id)
    )
    return (await session.exec(stmt)).first()
