from __future__ import annotations

import httpx
import pytest

from notes_backend.config import settings


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def _create_note(client: httpx.AsyncClient, token: str, **body: object) -> str:
    payload: dict[str, object] = {"title": "draft"}
    payload.update(body)
    r = await client.post("/api/v1/notes", json=payload, headers=_auth(token))
    assert r.status_code == 201, r.text
    return str(r.json()["id"])


async def _snapshot(client: httpx.AsyncClient, note_id: str, token: str = "tok-a") -> dict:
    r = await client.post(f"/api/v1/notes/{note_id}/versions", headers=_auth(token))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.anyio
async def test_snapshot_and_read_back(client: httpx.AsyncClient, make_user) -> None:
    alice_id = await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a", title="v1", body="one", tags=["x"])

    v1 = await _snapshot(client, note_id)
    assert v1["version_number"] == 1
    assert v1["title"] == "v1"
    assert v1["body"] == "one"
    assert v1["tags"] == ["x"]
    assert v1["author_id"] == str(alice_id)

    r = await client.get(f"/api/v1/notes/{note_id}/versions/{v1['id']}", headers=_auth("tok-a"))
    assert r.status_code == 200
    assert r.json()["body"] == "one"

    r = await client.get(f"/api/v1/notes/{note_id}/versions/nope", headers=_auth("tok-a"))
    assert r.status_code == 404


@pytest.mark.anyio
async def test_archive_is_capped_and_evicts_oldest(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a")

    created = []
    for i in range(21):
        r = await client.patch(
            f"/api/v1/notes/{note_id}", json={"body": f"rev {i}"}, headers=_auth("tok-a")
        )
        assert r.status_code == 200
        created.append(await _snapshot(client, note_id))

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    items = r.json()["items"]
    assert len(items) == 20
    numbers = [v["version_number"] for v in items]
    # Newest first; number 1 was evicted and numbering keeps climbing.
    assert numbers == list(range(21, 1, -1))

    r = await client.get(
        f"/api/v1/notes/{note_id}/versions/{created[0]['id']}", headers=_auth("tok-a")
    )
    assert r.status_code == 404

    await _snapshot(client, note_id)
    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    items = r.json()["items"]
    assert len(items) == 20
    assert items[0]["version_number"] == 22
    assert items[-1]["version_number"] == 3


@pytest.mark.anyio
async def test_retention_limit_is_configurable(client: httpx.AsyncClient, make_user) -> None:
    settings.version_retention_limit = 3
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a")

    for _ in range(5):
        await _snapshot(client, note_id)

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    assert [v["version_number"] for v in r.json()["items"]] == [5, 4, 3]


@pytest.mark.anyio
async def test_numbers_never_repeat_when_history_holds_one(
    client: httpx.AsyncClient, make_user
) -> None:
    settings.version_retention_limit = 1
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a")

    numbers = [(await _snapshot(client, note_id))["version_number"] for _ in range(3)]
    assert numbers == [1, 2, 3]

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    assert [v["version_number"] for v in r.json()["items"]] == [3]


@pytest.mark.anyio
async def test_restore_copies_content_and_snapshots_current(
    client: httpx.AsyncClient, make_user
) -> None:
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a", title="original", body="first", tags=["a"])
    v1 = await _snapshot(client, note_id)

    r = await client.patch(
        f"/api/v1/notes/{note_id}",
        json={"title": "changed", "body": "second", "tags": ["b"], "pinned": True},
        headers=_auth("tok-a"),
    )
    assert r.status_code == 200

    r = await client.post(
        f"/api/v1/notes/{note_id}/versions/{v1['id']}/restore", headers=_auth("tok-a")
    )
    assert r.status_code == 200, r.text
    restored = r.json()
    assert restored["title"] == "original"
    assert restored["body"] == "first"
    assert restored["tags"] == ["a"]
    # Flags are not part of a version.
    assert restored["pinned"] is True

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    items = r.json()["items"]
    assert len(items) == 2
    assert items[0]["title"] == "changed"

    # Restoring the same version again leaves the same content.
    r = await client.post(
        f"/api/v1/notes/{note_id}/versions/{v1['id']}/restore", headers=_auth("tok-a")
    )
    assert r.status_code == 200
    assert (r.json()["title"], r.json()["body"]) == ("original", "first")


@pytest.mark.anyio
async def test_restore_of_version_evicted_by_its_own_snapshot(
    client: httpx.AsyncClient, make_user
) -> None:
    settings.version_retention_limit = 2
    await make_user("alice@example.com", token="tok-a")
    note_id = await _create_note(client, "tok-a", body="oldest")
    oldest = await _snapshot(client, note_id)
    r = await client.patch(
        f"/api/v1/notes/{note_id}", json={"body": "newer"}, headers=_auth("tok-a")
    )
    assert r.status_code == 200
    await _snapshot(client, note_id)

    r = await client.post(
        f"/api/v1/notes/{note_id}/versions/{oldest['id']}/restore", headers=_auth("tok-a")
    )
    assert r.status_code == 200, r.text
    assert r.json()["body"] == "oldest"

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-a"))
    assert [v["version_number"] for v in r.json()["items"]] == [3, 2]


@pytest.mark.anyio
async def test_version_permissions(client: httpx.AsyncClient, make_user) -> None:
    await make_user("alice@example.com", token="tok-a")
    await make_user("bob@example.com", token="tok-b")
    await make_user("carol@example.com", token="tok-c")
    note_id = await _create_note(client, "tok-a")
    v1 = await _snapshot(client, note_id)

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

    # Editors can snapshot and read history, but only the owner restores.
    v2 = await _snapshot(client, note_id, token="tok-b")
    assert v2["version_number"] == 2
    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-b"))
    assert r.status_code == 200
    r = await client.post(
        f"/api/v1/notes/{note_id}/versions/{v1['id']}/restore", headers=_auth("tok-b")
    )
    assert r.status_code == 403

    r = await client.get(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-c"))
    assert r.status_code == 403
    r = await client.post(f"/api/v1/notes/{note_id}/versions", headers=_auth("tok-c"))
    assert r.status_code == 403

    r = await client.post("/api/v1/notes/missing/versions", headers=_auth("tok-a"))
    assert r.status_code == 404
