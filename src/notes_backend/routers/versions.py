"""Version archive router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.domain.sharing import Permission
from notes_backend.models import assume_utc
from notes_backend.models_notes import NoteVersion
from notes_backend.routers.notes import note_to_schema
from notes_backend.schemas import Note as NoteSchema
from notes_backend.schemas import NoteVersion as NoteVersionSchema
from notes_backend.schemas import NoteVersionList, NoteVersionSummary
from notes_backend.services import versions_service

router = APIRouter(tags=["versions"])


def _summary(v: NoteVersion) -> NoteVersionSummary:
    return NoteVersionSummary(
        id=v.id,
        note_id=v.note_id,
        version_number=v.version_number,
        title=v.title,
        author_id=str(v.author_user_id),
        created_at=assume_utc(v.created_at),
    )


def _full(v: NoteVersion) -> NoteVersionSchema:
    return NoteVersionSchema(
        **_summary(v).model_dump(),
        body=v.body,
        tags=list(v.tags_json or []),
    )


@router.post(
    "/notes/{note_id}/versions",
    response_model=NoteVersionSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteVersionSchema:
    version = await versions_service.create_snapshot(
        session=session, user_id=user_id, note_id=note_id
    )
    return _full(version)


@router.get("/notes/{note_id}/versions", response_model=NoteVersionList)
async def list_versions(
    note_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteVersionList:
    rows = await versions_service.list_versions(session=session, user_id=user_id, note_id=note_id)
    return NoteVersionList(items=[_summary(v) for v in rows])


@router.get("/notes/{note_id}/versions/{version_id}", response_model=NoteVersionSchema)
async def get_version(
    note_id: str,
    version_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteVersionSchema:
    version = await versions_service.get_version(
        session=session, user_id=user_id, note_id=note_id, version_id=version_id
    )
    return _full(version)


@router.post("/notes/{note_id}/versions/{version_id}/restore", response_model=NoteSchema)
async def restore_version(
    note_id: str,
    version_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NoteSchema:
    note = await versions_service.restore_version(
        session=session, user_id=user_id, note_id=note_id, version_id=version_id
    )
    # Restore is owner-only.
    return note_to_schema(note, user_id=user_id, permission=Permission.EDIT)
