from __future__ import annotations

from typing import Any, Protocol

from notes_backend.config import settings


class NotificationError(RuntimeError):
    pass


class NotificationDispatcher(Protocol):
    """Delivers one notification. Raises on failure; the caller decides on retries."""

    async def send(self, *, recipient_email: str, payload: dict[str, Any]) -> None: ...


def get_notification_dispatcher() -> NotificationDispatcher:
    backend = settings.notification_backend_name()
    if backend == "webhook":
        from .webhook import WebhookNotificationDispatcher

        return WebhookNotificationDispatcher(
            url=settings.notification_webhook_url,
            token=settings.notification_webhook_token,
            timeout_seconds=settings.notification_timeout_seconds,
        )
    if backend == "inapp":
        from .inapp import InAppNotificationDispatcher

        return InAppNotificationDispatcher()
    raise NotificationError(f"unknown NOTIFICATION_BACKEND: {backend}")
