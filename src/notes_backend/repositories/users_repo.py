from __future__ import annotations

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.models import User


async def get_user(session: AsyncSession, *, user_id: int) -> User | None:
    return (await session.exec(select(User).where(User.id == user_id))).first()


async def get_user_by_email(session: AsyncSession, *, email: str) -> User | None:
    # Identities are matched case-insensitively; email_lower is the unique key.
    email_lower = (email or "").strip().lower()
    if not email_lower:
        return None
    return (await session.exec(select(User).where(User.email_lower == email_lower))).first()


async def get_user_by_api_token(session: AsyncSession, *, token: str) -> User | None:
    return (await session.exec(select(User).where(User.api_token == token))).first()


async def get_users_by_ids(session: AsyncSession, *, user_ids: list[int]) -> dict[int, User]:
    ids = sorted({int(x) for x in user_ids})
    if not ids:
        return {}
    rows = (await session.exec(select(User).where(col(User.id).in_(ids)))).all()
    return {int(u.id): u for u in rows if u.id is not None}
