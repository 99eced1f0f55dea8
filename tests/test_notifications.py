from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from notes_backend.config import settings
from notes_backend.integrations.notifications.dispatcher import (
    NotificationError,
    get_notification_dispatcher,
)
from notes_backend.integrations.notifications.inapp import InAppNotificationDispatcher
from notes_backend.integrations.notifications.webhook import WebhookNotificationDispatcher


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def _deliver(email: str, key: str, **payload: Any) -> None:
    await InAppNotificationDispatcher().send(
        recipient_email=email,
        payload={"kind": "reminder", "dedupe_key": key, **payload},
    )


@pytest.mark.anyio
async def test_notifications_list_unread_count_and_mark_read(
    client: httpx.AsyncClient, make_user
) -> None:
    await make_user("alice@example.com", token="tok-a")
    await make_user("bob@example.com", token="tok-b")

    await _deliver("alice@example.com", "k1", note_id="n1", title="first")
    await _deliver("alice@example.com", "k2", note_id="n2", title="second")

    r = await client.get("/api/v1/notifications/unread-count", headers=_auth("tok-a"))
    assert r.status_code == 200
    assert r.json() == {"unread_count": 2}

    r = await client.get("/api/v1/notifications", headers=_auth("tok-a"))
    data = r.json()
    assert data["total"] == 2
    assert {n["payload"]["note_id"] for n in data["notifications"]} == {"n1", "n2"}
    assert all(n["kind"] == "reminder" for n in data["notifications"])
    notification_id = data["notifications"][0]["id"]

    # Other users neither see nor mark it.
    r = await client.post(
        f"/api/v1/notifications/{notification_id}/read", headers=_auth("tok-b")
    )
    assert r.status_code == 404
    r = await client.get("/api/v1/notifications", headers=_auth("tok-b"))
    assert r.json()["total"] == 0

    r = await client.post(
        f"/api/v1/notifications/{notification_id}/read", headers=_auth("tok-a")
    )
    assert r.status_code == 200
    first_read_at = r.json()["read_at"]
    assert first_read_at is not None

    # Marking again keeps the first timestamp.
    r = await client.post(
        f"/api/v1/notifications/{notification_id}/read", headers=_auth("tok-a")
    )
    assert r.json()["read_at"] == first_read_at

    r = await client.get("/api/v1/notifications/unread-count", headers=_auth("tok-a"))
    assert r.json() == {"unread_count": 1}
    r = await client.get(
        "/api/v1/notifications", params={"unread_only": True}, headers=_auth("tok-a")
    )
    assert r.json()["total"] == 1
    assert r.json()["notifications"][0]["id"] != notification_id


@pytest.mark.anyio
async def test_webhook_dispatcher_posts_json_with_bearer(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    real_client = httpx.AsyncClient

    def _client(**kwargs: Any) -> httpx.AsyncClient:
        return real_client(transport=httpx.MockTransport(_handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", _client)

    dispatcher = WebhookNotificationDispatcher(
        url="https://hooks.example.com/notes", token="hook-token", timeout_seconds=3
    )
    await dispatcher.send(recipient_email="alice@example.com", payload={"kind": "reminder", "note_id": "n1"})

    assert len(seen) == 1
    req = seen[0]
    assert str(req.url) == "https://hooks.example.com/notes"
    assert req.headers["Authorization"] == "Bearer hook-token"
    assert json.loads(req.content) == {"to": "alice@example.com", "kind": "reminder", "note_id": "n1"}


@pytest.mark.anyio
async def test_webhook_dispatcher_raises_on_non_2xx(monkeypatch: pytest.MonkeyPatch) -> None:
    real_client = httpx.AsyncClient

    def _client(**kwargs: Any) -> httpx.AsyncClient:
        return real_client(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down")),
            **kwargs,
        )

    monkeypatch.setattr(httpx, "AsyncClient", _client)

    dispatcher = WebhookNotificationDispatcher(
        url="https://hooks.example.com/notes", token="", timeout_seconds=3
    )
    with pytest.raises(NotificationError, match="500"):
        await dispatcher.send(recipient_email="alice@example.com", payload={"kind": "reminder"})

    with pytest.raises(NotificationError):
        await WebhookNotificationDispatcher(url=" ", token="", timeout_seconds=1).send(
            recipient_email="alice@example.com", payload={}
        )


def test_dispatcher_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "notification_backend", "inapp")
    assert isinstance(get_notification_dispatcher(), InAppNotificationDispatcher)

    monkeypatch.setattr(settings, "notification_backend", " WEBHOOK ")
    monkeypatch.setattr(settings, "notification_webhook_url", "https://hooks.example.com/notes")
    assert isinstance(get_notification_dispatcher(), WebhookNotificationDispatcher)

    monkeypatch.setattr(settings, "notification_backend", "carrier-pigeon")
    with pytest.raises(NotificationError):
        get_notification_dispatcher()
