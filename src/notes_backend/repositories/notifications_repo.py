from __future__ import annotations

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.models_notifications import Notification


async def get_by_dedupe_key(
    session: AsyncSession, *, user_id: int, dedupe_key: str
) -> Notification | None:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.dedupe_key == dedupe_key)
    )
    return (await session.exec(stmt)).first()


async def get_for_user(
    session: AsyncSession, *, user_id: int, notification_id: str
) -> Notification | None:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.id == notification_id)
    )
    return (await session.exec(stmt)).first()


async def list_for_user(
    session: AsyncSession, *, user_id: int, unread_only: bool, limit: int, offset: int
) -> tuple[list[Notification], int]:
    base = select(Notification).where(Notification.user_id == user_id)
    count_stmt = select(func.count()).select_from(Notification).where(
        Notification.user_id == user_id
    )
    if unread_only:
        base = base.where(col(Notification.read_at).is_(None))
        count_stmt = count_stmt.where(col(Notification.read_at).is_(None))

    total = int((await session.exec(count_stmt)).one() or 0)
    stmt = (
        base.order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
        .offset(int(offset))
        .limit(int(limit))
    )
    return list((await session.exec(stmt)).all()), total


async def unread_count(session: AsyncSession, *, user_id: int) -> int:
    stmt = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id)
        .where(col(Notification.read_at).is_(None))
    )
    return int((await session.exec(stmt)).one() or 0)
