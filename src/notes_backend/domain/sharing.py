"""Access rules for notes: permissions, grant states and reminder states.

Everything here is pure (no I/O) so the rules can be unit tested without a
database. Persisted rows store the enum values as plain strings; convert them
back with the enum constructors at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Permission(str, Enum):
    VIEW = "view"
    EDIT = "edit"


class GrantStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class ShareDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ReminderStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    SENT = "sent"


class AttachmentKind(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"


@dataclass(frozen=True)
class GrantView:
    permission: Permission
    status: GrantStatus


def effective_permission(
    *, owner_id: int, user_id: int, grant: GrantView | None
) -> Permission | None:
    """Owner -> edit; accepted grantee -> granted permission; anyone else -> None.

    Pending grants confer nothing.
    """
    if owner_id == user_id:
        return Permission.EDIT
    if grant is None or grant.status != GrantStatus.ACCEPTED:
        return None
    return grant.permission


def can_read(permission: Permission | None) -> bool:
    return permission is not None


def can_write(permission: Permission | None) -> bool:
    return permission == Permission.EDIT


def reminder_status_for(reminder_at: datetime | None) -> ReminderStatus:
    # Setting a timestamp (re)arms the reminder, also from `sent`; clearing disarms it.
    if reminder_at is None:
        return ReminderStatus.NONE
    return ReminderStatus.PENDING


def attachment_kind_for(content_type: str | None) -> AttachmentKind:
    if (content_type or "").lower().startswith("image/"):
        return AttachmentKind.IMAGE
    return AttachmentKind.DOCUMENT


MAX_TAGS_PER_NOTE = 10
MAX_TAG_LENGTH = 50


def normalize_tags(tags: list[str]) -> list[str]:
    """Trim, drop empties and de-duplicate case-insensitively (first spelling wins).

    Raises ValueError when the resulting set breaks the per-note limits.
    """
    out: list[str] = []
    seen: set[str] = set()
    for raw in tags:
        tag = (raw or "").strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"tag too long (max {MAX_TAG_LENGTH} chars)")
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(tag)
    if len(out) > MAX_TAGS_PER_NOTE:
        raise ValueError(f"too many tags (max {MAX_TAGS_PER_NOTE})")
    return out


def is_plausible_email(identity: str) -> bool:
    value = (identity or "").strip()
    if not value or any(ch.isspace() for ch in value):
        return False
    local, sep, domain = value.rpartition("@")
    return bool(sep) and bool(local) and "." in domain and not domain.startswith(".")
