"""Sharing by identity: grants, invitations and their responses.

A grant starts `pending` and only the grantee can accept it. Pending grants
confer no access. Grant and revoke do not bump the note's `updated_at`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.domain.sharing import (
    GrantStatus,
    Permission,
    ShareDecision,
    is_plausible_email,
)
from notes_backend.errors import ConflictError, InvalidArgumentError, NotFoundError
from notes_backend.models import User, utc_now
from notes_backend.models_notes import Note, NoteShare
from notes_backend.repositories import notes_repo, shares_repo, users_repo
from notes_backend.services import access_service
from notes_backend.services.note_writes import run_note_write

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrantResult:
    grant: NoteShare
    grantee: User
    # created | updated
    outcome: str


@dataclass(frozen=True)
class PendingShare:
    note_id: str
    title: str
    owner: User
    permission: Permission
    requested_at: datetime


@dataclass(frozen=True)
class AcceptedShare:
    note: Note
    owner: User
    permission: Permission


async def grant_access(
    *,
    session: AsyncSession,
    owner_id: int,
    note_id: str,
    grantee_email: str,
    permission: Permission,
) -> GrantResult:
    async def _unit(note: Note) -> GrantResult:
        access_service.require_owner(note, user_id=owner_id, action="share this note")
        if not is_plausible_email(grantee_email):
            raise InvalidArgumentError("invalid email address")

        grantee = await users_repo.get_user_by_email(session, email=grantee_email)
        if grantee is None or grantee.id is None:
            raise NotFoundError("user not found")
        grantee_id = int(grantee.id)
        if grantee_id == owner_id:
            raise InvalidArgumentError("cannot share a note with yourself")

        existing = await shares_repo.get_grant(session, note_id=note.id, grantee_user_id=grantee_id)
        if existing is not None:
            if existing.permission == permission.value:
                raise ConflictError("note already shared with this user")
            previous = existing.permission
            existing.permission = permission.value
            session.add(existing)
            # An accepted grant keeps its status: the owner may widen access without re-consent.
            logger.info(
                "share permission changed note_id=%s grantee_id=%s status=%s %s->%s",
                note.id,
                grantee_id,
                existing.status,
                previous,
                permission.value,
            )
            return GrantResult(grant=existing, grantee=grantee, outcome="updated")

        max_grants = int(settings.max_grants_per_note)
        existing_count = await shares_repo.count_grants(session, note_id=note.id)
        if max_grants > 0 and existing_count >= max_grants:
            raise InvalidArgumentError(f"too many shares for this note (max {max_grants})")

        grant = NoteShare(
            id=str(uuid.uuid4()),
            note_id=note.id,
            grantee_user_id=grantee_id,
            permission=permission.value,
            status=GrantStatus.PENDING.value,
            granted_at=utc_now(),
        )
        session.add(grant)
        return GrantResult(grant=grant, grantee=grantee, outcome="created")

    return await run_note_write(session, note_id=note_id, unit=_unit, op="grant")


async def respond_to_grant(
    *,
    session: AsyncSession,
    grantee_id: int,
    note_id: str,
    decision: ShareDecision,
) -> NoteShare | None:
    """accept -> grant becomes accepted (returned); reject -> grant deleted (None)."""

    async def _unit(note: Note) -> NoteShare | None:
        grant = await shares_repo.get_grant(session, note_id=note.id, grantee_user_id=grantee_id)
        if grant is None:
            raise NotFoundError("share request not found")
        if decision == ShareDecision.REJECT:
            await session.delete(grant)
            return None
        grant.status = GrantStatus.ACCEPTED.value
        session.add(grant)
        return grant

    return await run_note_write(session, note_id=note_id, unit=_unit, op="respond_to_grant")


async def revoke_grant(
    *,
    session: AsyncSession,
    owner_id: int,
    note_id: str,
    grantee_id: int,
) -> bool:
    """Idempotent; returns whether a grant was removed."""

    async def _unit(note: Note) -> bool:
        access_service.require_owner(note, user_id=owner_id, action="revoke shares")
        grant = await shares_repo.get_grant(session, note_id=note.id, grantee_user_id=grantee_id)
        if grant is None:
            return False
        await session.delete(grant)
        return True

    return await run_note_write(session, note_id=note_id, unit=_unit, op="revoke_grant")


async def list_grants(
    *, session: AsyncSession, owner_id: int, note_id: str
) -> list[tuple[NoteShare, User]]:
    note = await notes_repo.get_note(session, note_id=note_id)
    if note is None:
        raise NotFoundError("note not found")
    access_service.require_owner(note, user_id=owner_id, action="list shares")
    return await shares_repo.list_grants_for_note(session, note_id=note_id)


async def list_pending(*, session: AsyncSession, user_id: int) -> list[PendingShare]:
    rows = await shares_repo.list_grants_for_grantee(
        session, grantee_user_id=user_id, status=GrantStatus.PENDING.value
    )
    return [
        PendingShare(
            note_id=note.id,
            title=note.title,
            owner=owner,
            permission=Permission(grant.permission),
            requested_at=grant.granted_at,
        )
        for grant, note, owner in rows
    ]


async def list_shared_accepted(*, session: AsyncSession, user_id: int) -> list[AcceptedShare]:
    # Newest updated_at first (ordered by the repository).
    rows = await shares_repo.list_grants_for_grantee(
        session, grantee_user_id=user_id, status=GrantStatus.ACCEPTED.value
    )
    return [
        AcceptedShare(note=note, owner=owner, permission=Permission(grant.permission))
        for grant, note, owner in rows
    ]
