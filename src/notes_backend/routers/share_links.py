"""Public share links: owner management and anonymous resolution."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.models import assume_utc
from notes_backend.routers.attachments import attachment_to_schema
from notes_backend.schemas import SharedNote, ShareLinkCreated, ShareLinkRequest
from notes_backend.services import share_links_service

router = APIRouter(tags=["share-links"])
public_router = APIRouter(tags=["public"])


@router.post(
    "/notes/{note_id}/share-link",
    response_model=ShareLinkCreated,
    status_code=status.HTTP_201_CREATED,
)
async def issue_share_link(
    note_id: str,
    payload: ShareLinkRequest | None = None,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> ShareLinkCreated:
    ttl_hours = payload.ttl_hours if payload is not None else None
    issued = await share_links_service.issue_link(
        session=session, owner_id=user_id, note_id=note_id, ttl_hours=ttl_hours
    )
    return ShareLinkCreated(
        token=issued.token,
        share_url=issued.share_url,
        expires_at=issued.expires_at,
    )


@router.delete("/notes/{note_id}/share-link", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_share_link(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await share_links_service.revoke_link(session=session, owner_id=user_id, note_id=note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get("/public/shared/{token}", response_model=SharedNote)
async def get_shared_note(
    token: str,
    session: AsyncSession = Depends(get_session),
) -> SharedNote:
    view = await share_links_service.resolve_link(session=session, token=token)
    note = view.note
    return SharedNote(
        id=note.id,
        title=note.title,
        body=note.body,
        tags=list(note.tags_json or []),
        attachments=[attachment_to_schema(a) for a in view.attachments],
        owner_name=view.owner.name if view.owner is not None else "",
        expires_at=assume_utc(note.share_token_expires_at),
        created_at=assume_utc(note.created_at),
        updated_at=assume_utc(note.updated_at),
    )
