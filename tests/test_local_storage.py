from __future__ import annotations

from pathlib import Path

import pytest

from notes_backend.integrations.storage.local_storage import LocalObjectStorage
from notes_backend.integrations.storage.object_storage import build_attachment_storage_key


@pytest.mark.anyio
async def test_put_get_delete_roundtrip(tmp_path: Path) -> None:
    storage = LocalObjectStorage(root_dir=str(tmp_path))
    key = build_attachment_storage_key(note_id="n1", attachment_id="a1")
    assert key == "notes/n1/a1"

    await storage.put_bytes(key, b"abc")
    assert await storage.exists(key)
    assert await storage.get_bytes(key) == b"abc"
    assert not (tmp_path / "notes" / "n1" / "a1.tmp").exists()

    await storage.delete(key)
    assert not await storage.exists(key)
    # Empty per-note directory is removed with its last object.
    assert not (tmp_path / "notes" / "n1").exists()

    # Missing keys are not an error.
    await storage.delete(key)


@pytest.mark.parametrize("key", ["", "../etc/passwd", "notes/../../x"])
def test_rejects_unsafe_keys(tmp_path: Path, key: str) -> None:
    storage = LocalObjectStorage(root_dir=str(tmp_path))
    with pytest.raises(ValueError):
        storage.resolve_path(key)
