from __future__ import annotations

from typing import Protocol

from notes_backend.config import settings


class ObjectStorage(Protocol):
    """Binary attachment content, addressed by storage key."""

    async def put_bytes(
        self, key: str, data: bytes, *, content_type: str | None = None
    ) -> None: ...

    async def get_bytes(self, key: str) -> bytes: ...

    # Deleting a missing key is not an error.
    async def delete(self, key: str) -> None: ...


def build_attachment_storage_key(*, note_id: str, attachment_id: str) -> str:
    # Layout: ${ATTACHMENTS_LOCAL_DIR}/notes/{note_id}/{attachment_id}; same key on S3.
    return f"notes/{note_id}/{attachment_id}"


def s3_configured() -> bool:
    return bool(
        settings.s3_bucket.strip()
        and settings.s3_endpoint_url.strip()
        and settings.s3_access_key_id.strip()
        and settings.s3_secret_access_key.strip()
    )


def get_object_storage() -> ObjectStorage:
    # Local filesystem unless the S3 settings are complete.
    if s3_configured():
        from .s3_storage import S3ObjectStorage

        return S3ObjectStorage(
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
            bucket=settings.s3_bucket,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            force_path_style=settings.s3_force_path_style,
            timeout_seconds=settings.storage_timeout_seconds,
        )

    from .local_storage import LocalObjectStorage

    return LocalObjectStorage(root_dir=settings.attachments_local_dir)
