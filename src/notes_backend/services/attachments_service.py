from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable
from typing import TypeVar

from botocore.exceptions import BotoCoreError, ClientError
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.domain.sharing import attachment_kind_for
from notes_backend.errors import NotFoundError, UnavailableError
from notes_backend.http_headers import sanitize_filename
from notes_backend.integrations.storage.object_storage import (
    ObjectStorage,
    build_attachment_storage_key,
)
from notes_backend.models import utc_now
from notes_backend.models_notes import Note, NoteAttachment
from notes_backend.repositories import attachments_repo, notes_repo
from notes_backend.services import access_service
from notes_backend.services.note_writes import run_note_write

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def build_attachment_url(*, note_id: str, attachment_id: str) -> str:
    prefix = settings.api_prefix.rstrip("/")
    return f"{prefix}/notes/{note_id}/attachments/{attachment_id}"


def _is_missing_object(exc: BaseException) -> bool:
    if isinstance(exc, FileNotFoundError):
        return True
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", "")) in _MISSING_OBJECT_CODES
    return False


async def call_storage(call: Awaitable[T], *, op: str, key: str, missing_ok: bool = False) -> T:
    """Await one storage call with STORAGE_TIMEOUT_SECONDS as the bound.

    Backend failures and timeouts surface as UnavailableError. With
    `missing_ok`, an absent object surfaces as NotFoundError instead.
    """
    timeout = float(settings.storage_timeout_seconds)
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except (OSError, asyncio.TimeoutError, BotoCoreError, ClientError) as exc:
        if missing_ok and _is_missing_object(exc):
            raise NotFoundError("attachment content missing") from exc
        logger.warning("attachment storage %s failed key=%s", op, key, exc_info=True)
        raise UnavailableError("attachment storage unavailable", details={"op": op}) from exc


async def read_attachment_bytes(storage: ObjectStorage, *, storage_key: str) -> bytes:
    return await call_storage(
        storage.get_bytes(storage_key), op="get", key=storage_key, missing_ok=True
    )


async def delete_objects_best_effort(storage: ObjectStorage, storage_keys: list[str]) -> int:
    """Delete stored objects with a bounded wait each; returns how many failed."""
    timeout = float(settings.storage_timeout_seconds)
    failed = 0
    for key in storage_keys:
        try:
            await asyncio.wait_for(storage.delete(key), timeout=timeout)
        except Exception:
            failed += 1
            logger.warning("attachment storage cleanup failed key=%s", key, exc_info=True)
    return failed


async def create_note_attachment(
    *,
    session: AsyncSession,
    storage: ObjectStorage,
    user_id: int,
    note_id: str,
    filename: str | None,
    content_type: str | None,
    data: bytes,
) -> NoteAttachment:
    attachment_id = str(uuid.uuid4())
    storage_key = build_attachment_storage_key(note_id=note_id, attachment_id=attachment_id)

    async def _unit(note: Note) -> NoteAttachment:
        access_service.require_owner(note, user_id=user_id, action="add attachments")
        row = NoteAttachment(
            id=attachment_id,
            note_id=note.id,
            uploader_user_id=user_id,
            url=build_attachment_url(note_id=note.id, attachment_id=attachment_id),
            storage_key=storage_key,
            kind=attachment_kind_for(content_type).value,
            name=sanitize_filename(filename, fallback=attachment_id),
            size_bytes=len(data),
            content_type=content_type or None,
            created_at=utc_now(),
        )
        session.add(row)
        note.updated_at = utc_now()
        session.add(note)
        return row

    # Fail permission checks before touching storage; the claimed unit re-checks.
    note = await notes_repo.get_note(session, note_id=note_id)
    if note is None:
        raise NotFoundError("note not found")
    access_service.require_owner(note, user_id=user_id, action="add attachments")
    # Release the read transaction for the storage call; rollback also expires `note`.
    if session.in_transaction():
        await session.rollback()

    # Object first, row second: a row never points at a missing object.
    await call_storage(
        storage.put_bytes(storage_key, data, content_type=content_type), op="put", key=storage_key
    )
    try:
        return await run_note_write(session, note_id=note_id, unit=_unit, op="add_attachment")
    except Exception:
        await delete_objects_best_effort(storage, [storage_key])
        raise


async def get_attachment_for_read(
    *, session: AsyncSession, user_id: int, note_id: str, attachment_id: str
) -> NoteAttachment:
    await access_service.load_readable_note(session, note_id=note_id, user_id=user_id)
    row = await attachments_repo.get_attachment_for_note(
        session, note_id=note_id, attachment_id=attachment_id
    )
    if row is None:
        raise NotFoundError("attachment not found")
    return row


async def delete_note_attachment(
    *,
    session: AsyncSession,
    storage: ObjectStorage,
    user_id: int,
    note_id: str,
    attachment_id: str,
) -> None:
    async def _unit(note: Note) -> str:
        access_service.require_owner(note, user_id=user_id, action="delete attachments")
        row = await attachments_repo.get_attachment_for_note(
            session, note_id=note.id, attachment_id=attachment_id
        )
        if row is None:
            raise NotFoundError("attachment not found")
        await session.delete(row)
        note.updated_at = utc_now()
        session.add(note)
        return row.storage_key

    storage_key = await run_note_write(
        session, note_id=note_id, unit=_unit, op="delete_attachment"
    )
    await delete_objects_best_effort(storage, [storage_key])
