"""Notification center."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.db import get_session
from notes_backend.deps import current_user_id
from notes_backend.errors import NotFoundError
from notes_backend.models import assume_utc
from notes_backend.models_notifications import Notification as NotificationRow
from notes_backend.models_notifications import utc_now
from notes_backend.repositories import notifications_repo
from notes_backend.schemas import Notification as NotificationSchema
from notes_backend.schemas import NotificationListResponse, UnreadCountResponse

router = APIRouter(tags=["notifications"])


def _to_schema(row: NotificationRow) -> NotificationSchema:
    return NotificationSchema(
        id=row.id,
        kind=row.kind,
        payload=row.payload_json or {},
        created_at=assume_utc(row.created_at),
        read_at=assume_utc(row.read_at),
    )


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NotificationListResponse:
    rows, total = await notifications_repo.list_for_user(
        session, user_id=user_id, unread_only=unread_only, limit=limit, offset=offset
    )
    return NotificationListResponse(
        notifications=[_to_schema(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> UnreadCountResponse:
    return UnreadCountResponse(
        unread_count=await notifications_repo.unread_count(session, user_id=user_id)
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationSchema)
async def mark_notification_read(
    notification_id: str,
    user_id: int = Depends(current_user_id),
    session: AsyncSession = Depends(get_session),
) -> NotificationSchema:
    row = await notifications_repo.get_for_user(
        session, user_id=user_id, notification_id=notification_id
    )
    if row is None:
        raise NotFoundError("notification not found")

    if row.read_at is None:
        row.read_at = utc_now()
        row.updated_at = utc_now()
        session.add(row)
        await session.commit()
        await session.refresh(row)

    return _to_schema(row)
