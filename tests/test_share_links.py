from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest
import sqlalchemy as sa
from sqlmodel import SQLModel, select

from notes_backend.config import settings
from notes_backend.db import session_scope
from notes_backend.models import utc_now
from notes_backend.models_notes import Note
from notes_backend.services import share_links_service


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def _create_note(client: httpx.AsyncClient, token: str = "tok-a") -> str:
    r = await client.post(
        "/api/v1/notes", json={"title": "public", "body": "hello"}, headers=_auth(token)
    )
    assert r.status_code == 201, r.text
    return str(r.json()["id"])


async def _issue(
    client: httpx.AsyncClient, note_id: str, *, token: str = "tok-a", json: object = None
) -> httpx.Response:
    return await client.post(f"/api/v1/notes/{note_id}/share-link", json=json, headers=_auth(token))


@pytest.mark.anyio
async def test_issue_and_resolve_link(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a", name="Alice")
    note_id = await _create_note(client)

    r = await _issue(client, note_id, json={"ttl_hours": 24})
    assert r.status_code == 201, r.text
    data = r.json()
    token = data["token"]
    # 32 random bytes, urlsafe base64 without padding.
    assert len(token) >= 43
    assert data["share_url"] == f"http://test/shared/{token}"
    assert data["permission"] == "view"
    assert data["expires_at"] is not None

    # Anonymous: no Authorization header.
    r = await client.get(f"/api/v1/public/shared/{token}")
    assert r.status_code == 200, r.text
    shared = r.json()
    assert shared["id"] == note_id
    assert shared["body"] == "hello"
    assert shared["owner_name"] == "Alice"
    assert shared["permission"] == "view"


@pytest.mark.anyio
async def test_plaintext_token_is_not_stored(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)
    token = (await _issue(client, note_id)).json()["token"]

    async with session_scope() as session:
        note = (await session.exec(select(Note).where(Note.id == note_id))).one()
        assert note.share_token_hmac is not None
        assert note.share_token_hmac != token
        assert token not in note.share_token_hmac
        assert note.share_token_prefix == token[:8]
        assert note.share_token_expires_at is None


@pytest.mark.anyio
async def test_reissue_invalidates_previous_token(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)

    old = (await _issue(client, note_id)).json()["token"]
    new = (await _issue(client, note_id)).json()["token"]
    assert old != new

    assert (await client.get(f"/api/v1/public/shared/{old}")).status_code == 404
    assert (await client.get(f"/api/v1/public/shared/{new}")).status_code == 200


@pytest.mark.anyio
async def test_expired_link_is_gone_not_missing(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)
    token = (await _issue(client, note_id, json={"ttl_hours": 1})).json()["token"]

    notes = SQLModel.metadata.tables["notes"]
    async with session_scope() as session:
        await session.exec(
            sa.update(notes)
            .where(notes.c.id == note_id)
            .values(share_token_expires_at=utc_now() - timedelta(minutes=1))
        )
        await session.commit()

    r = await client.get(f"/api/v1/public/shared/{token}")
    assert r.status_code == 410
    assert r.json()["error"] == "gone"

    r = await client.get("/api/v1/public/shared/never-issued-token")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


@pytest.mark.anyio
async def test_revoke_link(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)
    token = (await _issue(client, note_id)).json()["token"]

    r = await client.delete(f"/api/v1/notes/{note_id}/share-link", headers=_auth("tok-a"))
    assert r.status_code == 204
    assert (await client.get(f"/api/v1/public/shared/{token}")).status_code == 404

    # No link: still fine.
    r = await client.delete(f"/api/v1/notes/{note_id}/share-link", headers=_auth("tok-a"))
    assert r.status_code == 204


@pytest.mark.anyio
async def test_only_owner_manages_links(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    await make_user("bob@example.com", token="tok-b")
    note_id = await _create_note(client)

    r = await client.post(
        f"/api/v1/notes/{note_id}/shares",
        json={"email": "bob@example.com", "permission": "edit"},
        headers=_auth("tok-a"),
    )
    assert r.status_code == 201
    r = await client.post(
        f"/api/v1/notes/{note_id}/shares/respond",
        json={"decision": "accept"},
        headers=_auth("tok-b"),
    )
    assert r.status_code == 200

    assert (await _issue(client, note_id, token="tok-b")).status_code == 403
    r = await client.delete(f"/api/v1/notes/{note_id}/share-link", headers=_auth("tok-b"))
    assert r.status_code == 403
    assert (await _issue(client, "missing")).status_code == 404


@pytest.mark.anyio
async def test_ttl_bounds(client: httpx.AsyncClient, make_user) -> None:
    settings.share_link_max_ttl_hours = 48
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)

    r = await _issue(client, note_id, json={"ttl_hours": 0})
    assert r.status_code == 422

    r = await _issue(client, note_id, json={"ttl_hours": 49})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_argument"

    r = await _issue(client, note_id, json={"ttl_hours": 48})
    assert r.status_code == 201


@pytest.mark.anyio
async def test_link_is_live_at_its_expiry_instant(
    client: httpx.AsyncClient, make_user, monkeypatch: pytest.MonkeyPatch
) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client)
    token = (await _issue(client, note_id, json={"ttl_hours": 1})).json()["token"]

    expiry = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    notes = SQLModel.metadata.tables["notes"]
    async with session_scope() as session:
        await session.exec(
            sa.update(notes).where(notes.c.id == note_id).values(share_token_expires_at=expiry)
        )
        await session.commit()

    monkeypatch.setattr(share_links_service, "utc_now", lambda: expiry)
    r = await client.get(f"/api/v1/public/shared/{token}")
    assert r.status_code == 200, r.text

    monkeypatch.setattr(
        share_links_service, "utc_now", lambda: expiry + timedelta(microseconds=1)
    )
    r = await client.get(f"/api/v1/public/shared/{token}")
    assert r.status_code == 410
    assert r.json()["error"] == "gone"
