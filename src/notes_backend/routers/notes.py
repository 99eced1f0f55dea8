"""Notes router."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.domain.sharing import Permission, ReminderStatus
from notes_backend.integrations.storage.object_storage import ObjectStorage, get_object_storage
from notes_backend.models import assume_utc
from notes_backend.models_notes import Note, NoteAttachment
from notes_backend.routers.attachments import attachment_to_schema
from notes_backend.schemas import Note as NoteSchema
from notes_backend.schemas import NoteCreateRequest, NoteList, NotePatchRequest
from notes_backend.services import notes_service

router = APIRouter(tags=["notes"])


def note_to_schema(
    note: Note,
    *,
    user_id: int,
    permission: Permission,
    attachments: list[NoteAttachment] | None = None,
) -> NoteSchema:
    return NoteSchema(
        id=note.id,
        owner_id=str(note.user_id),
        title=note.title,
        body=note.body,
        tags=list(note.tags_json or []),
        pinned=note.pinned,
        archived=note.archived,
        reminder_at=assume_utc(note.reminder_at),
        reminder_status=ReminderStatus(note.reminder_status),
        is_owner=note.user_id == user_id,
        permission=permission,
        attachments=[attachment_to_schema(a) for a in attachments or []],
        created_at=assume_utc(note.created_at),
        updated_at=assume_utc(note.updated_at),
    )


@router.post("/notes", response_model=NoteSchema, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreateRequest,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteSchema:
    note = await notes_service.create_note(
        session=session,
        user_id=user_id,
        title=payload.title,
        body=payload.body,
        tags=payload.tags,
    )
    return note_to_schema(note, user_id=user_id, permission=Permission.EDIT)


@router.get("/notes", response_model=NoteList)
async def list_notes(
    archived: Annotated[Literal["false", "true", "all"], Query()] = "false",
    tag: Annotated[str | None, Query(max_length=50)] = None,
    q: Annotated[str | None, Query(max_length=200)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteList:
    archived_filter = None if archived == "all" else archived == "true"
    items, total = await notes_service.list_notes(
        session=session,
        user_id=user_id,
        archived=archived_filter,
        tag=tag,
        q=q,
        limit=limit,
        offset=offset,
    )
    return NoteList(
        items=[
            note_to_schema(item.note, user_id=user_id, permission=item.permission)
            for item in items
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/notes/{note_id}", response_model=NoteSchema)
async def get_note(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteSchema:
    note, permission, attachments = await notes_service.get_note(
        session=session, user_id=user_id, note_id=note_id
    )
    return note_to_schema(note, user_id=user_id, permission=permission, attachments=attachments)


@router.patch("/notes/{note_id}", response_model=NoteSchema)
async def patch_note(
    note_id: str,
    payload: NotePatchRequest,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteSchema:
    changes: dict[str, Any] = {
        name: getattr(payload, name)
        for name in ("title", "body", "tags", "pinned", "archived")
        if name in payload.model_fields_set
    }
    if "reminder_at" in payload.model_fields_set:
        changes["reminder_at"] = payload.reminder_at

    note, permission = await notes_service.update_note(
        session=session, user_id=user_id, note_id=note_id, **changes
    )
    _, _, attachments = await notes_service.get_note(
        session=session, user_id=user_id, note_id=note.id
    )
    return note_to_schema(note, user_id=user_id, permission=permission, attachments=attachments)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> Response:
    await notes_service.delete_note(
        session=session, storage=storage, user_id=user_id, note_id=note_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
