from __future__ import annotations

from typing import cast

import httpx
import pytest

from notes_backend.main import app  # pyright: ignore[reportMissingTypeStubs]


def _make_async_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


async def _openapi() -> dict[str, object]:
    async with _make_async_client() as client:
        r = await client.get("/openapi.json")
        assert r.status_code == 200
        return cast(dict[str, object], r.json())


def _operation(data: dict[str, object], path: str, method: str) -> dict[str, object]:
    paths = cast(dict[str, object], data.get("paths", {}))
    path_item = paths.get(path)
    assert isinstance(path_item, dict), path
    op = cast(dict[str, object], path_item).get(method)
    assert isinstance(op, dict), f"{method} {path}"
    return cast(dict[str, object], op)


@pytest.mark.anyio
async def test_openapi_lists_every_route() -> None:
    data = await _openapi()
    expected = [
        ("/api/v1/notes", "post"),
        ("/api/v1/notes", "get"),
        ("/api/v1/notes/{note_id}", "patch"),
        ("/api/v1/notes/{note_id}", "delete"),
        ("/api/v1/notes/{note_id}/attachments", "post"),
        ("/api/v1/notes/{note_id}/shares", "post"),
        ("/api/v1/notes/{note_id}/shares/respond", "post"),
        ("/api/v1/shares/pending", "get"),
        ("/api/v1/shares/accepted", "get"),
        ("/api/v1/notes/{note_id}/share-link", "post"),
        ("/api/v1/public/shared/{token}", "get"),
        ("/api/v1/notes/{note_id}/versions", "post"),
        ("/api/v1/notes/{note_id}/versions/{version_id}/restore", "post"),
        ("/api/v1/notifications/unread-count", "get"),
        ("/api/v1/ai/generate-title", "post"),
        ("/api/v1/ai/summarize", "post"),
        ("/api/v1/ai/suggest-tags", "post"),
        ("/api/v1/ai/improve", "post"),
    ]
    for path, method in expected:
        _operation(data, path, method)


@pytest.mark.anyio
async def test_openapi_documents_error_envelope_and_request_id() -> None:
    data = await _openapi()

    components = cast(dict[str, object], data["components"])
    schemas = cast(dict[str, object], components["schemas"])
    assert "ErrorResponse" in schemas

    op = _operation(data, "/api/v1/public/shared/{token}", "get")
    responses = cast(dict[str, object], op["responses"])
    for code in ("404", "410", "503"):
        resp = cast(dict[str, object], responses[code])
        content = cast(dict[str, object], resp["content"])
        media = cast(dict[str, object], content["application/json"])
        assert media["schema"] == {"$ref": "#/components/schemas/ErrorResponse"}

    ok = cast(dict[str, object], responses["200"])
    headers = cast(dict[str, object], ok["headers"])
    assert "X-Request-Id" in headers

    # Validation errors use the same envelope.
    resp_422 = cast(dict[str, object], responses["422"])
    content_422 = cast(dict[str, object], resp_422["content"])
    assert cast(dict[str, object], content_422["application/json"])["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
