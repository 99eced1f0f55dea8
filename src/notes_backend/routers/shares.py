"""Sharing by identity: grants, invitations, responses."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.domain.sharing import GrantStatus, Permission, ShareDecision
from notes_backend.models import User, assume_utc
from notes_backend.models_notes import NoteShare
from notes_backend.schemas import (
    PendingShare,
    PendingShareList,
    ShareGrant,
    ShareGrantList,
    ShareGrantRequest,
    ShareGrantResult,
    SharedWithMeList,
    SharedWithMeNote,
    ShareRespondRequest,
    ShareRespondResult,
)
from notes_backend.services import shares_service

router = APIRouter(tags=["shares"])


def _grant_to_schema(grant: NoteShare, grantee: User) -> ShareGrant:
    return ShareGrant(
        note_id=grant.note_id,
        grantee_id=str(grant.grantee_user_id),
        grantee_email=grantee.email,
        grantee_name=grantee.name,
        permission=Permission(grant.permission),
        status=GrantStatus(grant.status),
        granted_at=assume_utc(grant.granted_at),
    )


@router.post("/notes/{note_id}/shares", response_model=ShareGrantResult)
async def grant_share(
    note_id: str,
    payload: ShareGrantRequest,
    response: Response,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> ShareGrantResult:
    result = await shares_service.grant_access(
        session=session,
        owner_id=user_id,
        note_id=note_id,
        grantee_email=payload.email,
        permission=payload.permission,
    )
    if result.outcome == "created":
        response.status_code = status.HTTP_201_CREATED
    return ShareGrantResult(
        grant=_grant_to_schema(result.grant, result.grantee),
        outcome="created" if result.outcome == "created" else "updated",
    )


@router.get("/notes/{note_id}/shares", response_model=ShareGrantList)
async def list_note_shares(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> ShareGrantList:
    rows = await shares_service.list_grants(session=session, owner_id=user_id, note_id=note_id)
    return ShareGrantList(items=[_grant_to_schema(grant, grantee) for grant, grantee in rows])


@router.post("/notes/{note_id}/shares/respond", response_model=ShareRespondResult)
async def respond_to_share(
    note_id: str,
    payload: ShareRespondRequest,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> ShareRespondResult:
    grant = await shares_service.respond_to_grant(
        session=session, grantee_id=user_id, note_id=note_id, decision=payload.decision
    )
    if payload.decision == ShareDecision.REJECT or grant is None:
        return ShareRespondResult(note_id=note_id, status="rejected")
    return ShareRespondResult(
        note_id=note_id, status="accepted", permission=Permission(grant.permission)
    )


@router.delete(
    "/notes/{note_id}/shares/{grantee_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def revoke_share(
    note_id: str,
    grantee_user_id: int,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await shares_service.revoke_grant(
        session=session, owner_id=user_id, note_id=note_id, grantee_id=grantee_user_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/shares/pending", response_model=PendingShareList)
async def list_pending_shares(
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> PendingShareList:
    rows = await shares_service.list_pending(session=session, user_id=user_id)
    return PendingShareList(
        items=[
            PendingShare(
                note_id=r.note_id,
                title=r.title,
                owner_id=str(r.owner.id),
                owner_name=r.owner.name,
                owner_email=r.owner.email,
                permission=r.permission,
                requested_at=assume_utc(r.requested_at),
            )
            for r in rows
        ]
    )


@router.get("/shares/accepted", response_model=SharedWithMeList)
async def list_accepted_shares(
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> SharedWithMeList:
    rows = await shares_service.list_shared_accepted(session=session, user_id=user_id)
    return SharedWithMeList(
        items=[
            SharedWithMeNote(
                id=r.note.id,
                title=r.note.title,
                body=r.note.body,
                tags=list(r.note.tags_json or []),
                pinned=r.note.pinned,
                archived=r.note.archived,
                owner_id=str(r.note.user_id),
                owner_name=r.owner.name,
                my_permission=r.permission,
                created_at=assume_utc(r.note.created_at),
                updated_at=assume_utc(r.note.updated_at),
            )
            for r in rows
        ]
    )
