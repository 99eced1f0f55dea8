from __future__ import annotations

from pathlib import Path, PurePosixPath

from starlette.concurrency import run_in_threadpool


def _safe_join(root: Path, key: str) -> Path:
    parts = [p for p in PurePosixPath(key).parts if p not in {"/", ""}]
    if not parts or any(p in {"..", "."} for p in parts):
        raise ValueError("invalid storage key")
    return root.joinpath(*parts)


class LocalObjectStorage:
    """Stores objects as files under `root_dir`, one file per key."""

    def __init__(self, *, root_dir: str) -> None:
        self._root = Path(root_dir)

    def resolve_path(self, key: str) -> Path:
        return _safe_join(self._root, key)

    async def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        _ = content_type
        path = self.resolve_path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so readers never see a partial file.
            tmp_path = path.with_name(path.name + ".tmp")
            _ = tmp_path.write_bytes(data)
            _ = tmp_path.replace(path)

        await run_in_threadpool(_write)

    async def get_bytes(self, key: str) -> bytes:
        path = self.resolve_path(key)
        return await run_in_threadpool(path.read_bytes)

    async def exists(self, key: str) -> bool:
        path = self.resolve_path(key)
        return await run_in_threadpool(path.is_file)

    async def delete(self, key: str) -> None:
        path = self.resolve_path(key)

        def _unlink() -> None:
            path.unlink(missing_ok=True)
            # Drop the per-note directory once its last object is gone.
            parent = path.parent
            if parent != self._root and parent.is_dir() and not any(parent.iterdir()):
                parent.rmdir()

        await run_in_threadpool(_unlink)
