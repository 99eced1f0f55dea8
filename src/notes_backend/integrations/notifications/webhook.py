from __future__ import annotations

from typing import Any

import httpx

from .dispatcher import NotificationError


class WebhookNotificationDispatcher:
    """POSTs notifications as JSON to an external delivery service (e-mail, push, ...)."""

    def __init__(self, *, url: str, token: str, timeout_seconds: float) -> None:
        self._url = url.strip()
        self._token = token.strip()
        self._timeout = timeout_seconds

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def send(self, *, recipient_email: str, payload: dict[str, Any]) -> None:
        if not self._url:
            raise NotificationError("NOTIFICATION_WEBHOOK_URL is empty")
        body = {"to": recipient_email, **payload}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(self._url, headers=self._headers(), json=body)
        if not 200 <= resp.status_code < 300:
            raise NotificationError(
                f"webhook delivery failed: {resp.status_code} {resp.text[:200]}"
            )
