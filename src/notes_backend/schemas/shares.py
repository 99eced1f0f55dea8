from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from notes_backend.domain.sharing import GrantStatus, Permission, ShareDecision
from notes_backend.schemas.attachments import Attachment


class ShareGrantRequest(BaseModel):
    # Grantee identity; resolved case-insensitively.
    email: str = Field(min_length=1, max_length=320)
    permission: Permission = Permission.VIEW


class ShareGrant(BaseModel):
    note_id: str
    grantee_id: str
    grantee_email: str
    grantee_name: str
    permission: Permission
    status: GrantStatus
    granted_at: datetime


class ShareGrantResult(BaseModel):
    grant: ShareGrant
    outcome: Literal["created", "updated"]


class ShareGrantList(BaseModel):
    items: list[ShareGrant] = Field(default_factory=list)


class ShareRespondRequest(BaseModel):
    decision: ShareDecision


class ShareRespondResult(BaseModel):
    note_id: str
    status: Literal["accepted", "rejected"]
    permission: Permission | None = None


class PendingShare(BaseModel):
    note_id: str
    title: str
    owner_id: str
    owner_name: str
    owner_email: str
    permission: Permission
    requested_at: datetime


class PendingShareList(BaseModel):
    items: list[PendingShare] = Field(default_factory=list)


class SharedWithMeNote(BaseModel):
    id: str
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    pinned: bool
    archived: bool
    owner_id: str
    owner_name: str
    my_permission: Permission
    created_at: datetime
    updated_at: datetime


class SharedWithMeList(BaseModel):
    items: list[SharedWithMeNote] = Field(default_factory=list)


class ShareLinkRequest(BaseModel):
    # Omitted: the link never expires.
    ttl_hours: int | None = Field(default=None, ge=1)


class ShareLinkCreated(BaseModel):
    token: str
    share_url: str
    expires_at: datetime | None = None
    permission: Literal["view"] = "view"


class SharedNote(BaseModel):
    """Read-only projection served to anonymous link holders."""

    id: str
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    owner_name: str
    permission: Literal["view"] = "view"
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
