from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text, UniqueConstraint
from sqlalchemy.types import JSON as SAJSON
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Keep this module standalone to avoid import cycles with notes_backend.models.


class Note(SQLModel, table=True):
    __tablename__ = "notes"  # pyright: ignore[reportAssignmentType]

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    # Owner. Never reassigned after creation.
    user_id: int = Field(index=True, foreign_key="users.id")

    title: str = Field(min_length=1, max_length=200)
    body: str = Field(default="", sa_column=Column(Text, nullable=False))
    # Normalized tag set, insertion order. See domain.sharing.normalize_tags.
    tags_json: list[str] = Field(default_factory=list, sa_column=Column(SAJSON, nullable=False))

    pinned: bool = Field(default=False, index=True)
    archived: bool = Field(default=False, index=True)

    reminder_at: Optional[datetime] = Field(default=None, index=True)
    # none | pending | sent (domain.sharing.ReminderStatus)
    reminder_status: str = Field(default="none", max_length=20, index=True)

    # Public link. NEVER store plaintext share tokens.
    share_token_hmac: Optional[str] = Field(default=None, max_length=128, unique=True)
    share_token_prefix: Optional[str] = Field(default=None, max_length=32)
    share_token_expires_at: Optional[datetime] = Field(default=None)

    # Bumped by every claimed write (see services.note_writes).
    revision: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)


class NoteShare(SQLModel, table=True):
    __tablename__ = "note_shares"  # pyright: ignore[reportAssignmentType]

    __table_args__ = (
        UniqueConstraint("note_id", "grantee_user_id", name="uq_note_shares_note_grantee"),
    )

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    note_id: str = Field(index=True, foreign_key="notes.id", min_length=1, max_length=36)
    grantee_user_id: int = Field(index=True, foreign_key="users.id")

    # view | edit
    permission: str = Field(max_length=10)
    # pending | accepted
    status: str = Field(default="pending", max_length=20, index=True)

    granted_at: datetime = Field(default_factory=utc_now, index=True)


class NoteAttachment(SQLModel, table=True):
    __tablename__ = "note_attachments"  # pyright: ignore[reportAssignmentType]

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    note_id: str = Field(index=True, foreign_key="notes.id", min_length=1, max_length=36)
    uploader_user_id: int = Field(index=True, foreign_key="users.id")

    # Metadata only. Binary content lives in object storage under storage_key.
    url: str = Field(max_length=1024)
    storage_key: str = Field(min_length=1, max_length=512, unique=True)
    # image | document
    kind: str = Field(default="document", max_length=20)
    name: Optional[str] = Field(default=None, max_length=255)
    size_bytes: int = Field(default=0)
    content_type: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now, index=True)


class NoteVersion(SQLModel, table=True):
    __tablename__ = "note_versions"  # pyright: ignore[reportAssignmentType]

    __table_args__ = (
        UniqueConstraint("note_id", "version_number", name="uq_note_versions_note_number"),
    )

    id: str = Field(primary_key=True, min_length=1, max_length=36)
    note_id: str = Field(index=True, foreign_key="notes.id", min_length=1, max_length=36)

    title: str = Field(max_length=200)
    body: str = Field(default="", sa_column=Column(Text, nullable=False))
    tags_json: list[str] = Field(default_factory=list, sa_column=Column(SAJSON, nullable=False))

    version_number: int = Field(index=True)
    author_user_id: int = Field(index=True, foreign_key="users.id")

    created_at: datetime = Field(default_factory=utc_now, index=True)
