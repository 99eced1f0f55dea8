from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from notes_backend.domain.sharing import AttachmentKind


class Attachment(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    note_id: str = Field(min_length=1, max_length=36)
    url: str
    kind: AttachmentKind
    name: str | None = Field(default=None, max_length=255)
    content_type: str | None = Field(default=None, max_length=255)
    size_bytes: int
    uploader_id: str
    created_at: datetime
