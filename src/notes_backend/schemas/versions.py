from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NoteVersionSummary(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    note_id: str
    version_number: int
    title: str
    author_id: str
    created_at: datetime


class NoteVersion(NoteVersionSummary):
    body: str
    tags: list[str] = Field(default_factory=list)


class NoteVersionList(BaseModel):
    items: list[NoteVersionSummary] = Field(default_factory=list)
