"""Note attachments router."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.domain.sharing import AttachmentKind
from notes_backend.errors import NotFoundError
from notes_backend.http_headers import build_content_disposition
from notes_backend.integrations.storage.local_storage import LocalObjectStorage
from notes_backend.integrations.storage.object_storage import ObjectStorage, get_object_storage
from notes_backend.models import assume_utc
from notes_backend.models_notes import NoteAttachment
from notes_backend.schemas import Attachment as AttachmentSchema
from notes_backend.services import attachments_service

router = APIRouter(tags=["attachments"])


def attachment_to_schema(row: NoteAttachment) -> AttachmentSchema:
    return AttachmentSchema(
        id=row.id,
        note_id=row.note_id,
        url=row.url,
        kind=AttachmentKind(row.kind),
        name=row.name,
        content_type=row.content_type,
        size_bytes=row.size_bytes,
        uploader_id=str(row.uploader_user_id),
        created_at=assume_utc(row.created_at),
    )


async def _read_upload_file_limited(*, file: UploadFile, max_bytes: int) -> bytes:
    # Read in chunks and hard-stop once size exceeds max_bytes.
    buf = bytearray()
    chunk_size = 1024 * 1024
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail={"message": "attachment too large", "details": {"max_bytes": max_bytes}},
            )
    return bytes(buf)


@router.post(
    "/notes/{note_id}/attachments",
    response_model=AttachmentSchema,
    status_code=status.HTTP_201_CREATED,
)
async def upload_note_attachment(
    note_id: str,
    file: Annotated[UploadFile, File()],
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> AttachmentSchema:
    max_bytes = int(settings.attachments_max_size_bytes)
    if max_bytes > 0:
        data = await _read_upload_file_limited(file=file, max_bytes=max_bytes)
    else:
        data = await file.read()

    row = await attachments_service.create_note_attachment(
        session=session,
        storage=storage,
        user_id=user_id,
        note_id=note_id,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
    )
    return attachment_to_schema(row)


@router.get("/notes/{note_id}/attachments/{attachment_id}")
async def download_note_attachment(
    note_id: str,
    attachment_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> Response:
    row = await attachments_service.get_attachment_for_read(
        session=session, user_id=user_id, note_id=note_id, attachment_id=attachment_id
    )

    media_type = row.content_type or "application/octet-stream"
    filename = row.name or row.id

    if isinstance(storage, LocalObjectStorage):
        exists = await attachments_service.call_storage(
            storage.exists(row.storage_key), op="exists", key=row.storage_key
        )
        if not exists:
            raise NotFoundError("attachment content missing")
        path = storage.resolve_path(row.storage_key)
        return FileResponse(
            path,
            media_type=media_type,
            headers={"Content-Disposition": build_content_disposition(filename)},
        )

    data = await attachments_service.read_attachment_bytes(storage, storage_key=row.storage_key)
    headers = {"Content-Disposition": build_content_disposition(filename)}
    return Response(content=data, media_type=media_type, headers=headers)


@router.delete(
    "/notes/{note_id}/attachments/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_note_attachment(
    note_id: str,
    attachment_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> Response:
    await attachments_service.delete_note_attachment(
        session=session,
        storage=storage,
        user_id=user_id,
        note_id=note_id,
        attachment_id=attachment_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
