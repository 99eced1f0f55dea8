from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.domain.sharing import (
    GrantStatus,
    GrantView,
    Permission,
    can_read,
    can_write,
    effective_permission,
)
from notes_backend.errors import ForbiddenError, NotFoundError
from notes_backend.models_notes import Note
from notes_backend.repositories import notes_repo, shares_repo


async def permission_for(session: AsyncSession, *, note: Note, user_id: int) -> Permission | None:
    """Effective permission of `user_id` on `note`, read fresh from the grants table."""
    if note.user_id == user_id:
        return Permission.EDIT
    grant = await shares_repo.get_grant(session, note_id=note.id, grantee_user_id=user_id)
    view = None
    if grant is not None:
        view = GrantView(permission=Permission(grant.permission), status=GrantStatus(grant.status))
    return effective_permission(owner_id=note.user_id, user_id=user_id, grant=view)


def require_owner(note: Note, *, user_id: int, action: str) -> None:
    if note.user_id != user_id:
        raise ForbiddenError(f"only the owner can {action}")


async def require_read(session: AsyncSession, *, note: Note, user_id: int) -> Permission:
    permission = await permission_for(session, note=note, user_id=user_id)
    if not can_read(permission):
        raise ForbiddenError("no access to this note")
    assert permission is not None
    return permission


async def require_write(session: AsyncSession, *, note: Note, user_id: int) -> Permission:
    permission = await permission_for(session, note=note, user_id=user_id)
    if not can_write(permission):
        raise ForbiddenError("edit permission required")
    assert permission is not None
    return permission


async def load_readable_note(
    session: AsyncSession, *, note_id: str, user_id: int
) -> tuple[Note, Permission]:
    note = await notes_repo.get_note(session, note_id=note_id)
    if note is None:
        raise NotFoundError("note not found")
    permission = await require_read(session, note=note, user_id=user_id)
    return note, permission
