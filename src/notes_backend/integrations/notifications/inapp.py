from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError

from notes_backend.db import session_scope
from notes_backend.models_notifications import Notification, utc_now
from notes_backend.repositories import notifications_repo, users_repo

from .dispatcher import NotificationError


class InAppNotificationDispatcher:
    """Writes the notification into the recipient's notification center.

    `payload["dedupe_key"]` makes redelivery of the same event a no-op.
    """

    async def send(self, *, recipient_email: str, payload: dict[str, Any]) -> None:
        kind = str(payload.get("kind") or "reminder")
        dedupe_key = str(payload.get("dedupe_key") or uuid.uuid4())

        async with session_scope() as session:
            user = await users_repo.get_user_by_email(session, email=recipient_email)
            if user is None or user.id is None:
                raise NotificationError("recipient not found")
            user_id = int(user.id)

            existing = await notifications_repo.get_by_dedupe_key(
                session, user_id=user_id, dedupe_key=dedupe_key
            )
            if existing is not None:
                return

            body = {k: v for k, v in payload.items() if k not in {"kind", "dedupe_key"}}
            now = utc_now()
            session.add(
                Notification(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    kind=kind,
                    payload_json=body,
                    dedupe_key=dedupe_key,
                    created_at=now,
                    updated_at=now,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race with a concurrent delivery of the same event.
                await session.rollback()
