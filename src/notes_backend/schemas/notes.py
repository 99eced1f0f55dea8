from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from notes_backend.domain.sharing import Permission, ReminderStatus
from notes_backend.schemas.attachments import Attachment


class Note(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    owner_id: str
    title: str = Field(max_length=200)
    body: str = Field(max_length=50000)
    tags: list[str] = Field(default_factory=list)
    pinned: bool = False
    archived: bool = False
    reminder_at: datetime | None = None
    reminder_status: ReminderStatus = ReminderStatus.NONE
    # Caller's view of the note.
    is_owner: bool
    permission: Permission
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class NoteCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(default="", max_length=50000)
    tags: list[str] = Field(default_factory=list)


class NotePatchRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    body: str | None = Field(default=None, max_length=50000)
    tags: list[str] | None = None
    pinned: bool | None = None
    archived: bool | None = None
    # Explicit null clears the reminder; omitted leaves it as is.
    reminder_at: datetime | None = None

    @model_validator(mode="after")
    def _ensure_any_field_present(self) -> "NotePatchRequest":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


class NoteList(BaseModel):
    items: list[Note] = Field(default_factory=list)
    total: int
    limit: int
    offset: int
