from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notes_backend.domain.sharing import (
    MAX_TAG_LENGTH,
    MAX_TAGS_PER_NOTE,
    AttachmentKind,
    GrantStatus,
    GrantView,
    Permission,
    ReminderStatus,
    attachment_kind_for,
    can_read,
    can_write,
    effective_permission,
    is_plausible_email,
    normalize_tags,
    reminder_status_for,
)
from notes_backend.http_headers import build_content_disposition, sanitize_filename


def test_owner_always_has_edit():
    assert effective_permission(owner_id=1, user_id=1, grant=None) == Permission.EDIT


@pytest.mark.parametrize(
    ("grant", "expected"),
    [
        (None, None),
        (GrantView(permission=Permission.EDIT, status=GrantStatus.PENDING), None),
        (GrantView(permission=Permission.VIEW, status=GrantStatus.ACCEPTED), Permission.VIEW),
        (GrantView(permission=Permission.EDIT, status=GrantStatus.ACCEPTED), Permission.EDIT),
    ],
)
def test_effective_permission_for_non_owner(grant, expected):
    assert effective_permission(owner_id=1, user_id=2, grant=grant) == expected


def test_read_write_checks():
    assert not can_read(None)
    assert can_read(Permission.VIEW)
    assert not can_write(Permission.VIEW)
    assert can_write(Permission.EDIT)


def test_reminder_status_for():
    assert reminder_status_for(None) == ReminderStatus.NONE
    assert reminder_status_for(datetime(2030, 1, 1, tzinfo=timezone.utc)) == ReminderStatus.PENDING


def test_attachment_kind_for():
    assert attachment_kind_for("image/jpeg") == AttachmentKind.IMAGE
    assert attachment_kind_for("IMAGE/PNG") == AttachmentKind.IMAGE
    assert attachment_kind_for("application/pdf") == AttachmentKind.DOCUMENT
    assert attachment_kind_for(None) == AttachmentKind.DOCUMENT


def test_normalize_tags_dedupes_case_insensitively():
    assert normalize_tags([" Work ", "work", "", "home", "HOME"]) == ["Work", "home"]


def test_normalize_tags_limits():
    normalize_tags([f"t{i}" for i in range(MAX_TAGS_PER_NOTE)])
    with pytest.raises(ValueError, match="too many tags"):
        normalize_tags([f"t{i}" for i in range(MAX_TAGS_PER_NOTE + 1)])
    with pytest.raises(ValueError, match="tag too long"):
        normalize_tags(["x" * (MAX_TAG_LENGTH + 1)])


@pytest.mark.parametrize(
    ("value", "ok"),
    [
        ("bob@example.com", True),
        (" bob@example.com ", True),
        ("bob", False),
        ("@example.com", False),
        ("bob@localhost", False),
        ("bob@.com", False),
        ("b ob@example.com", False),
        ("", False),
    ],
)
def test_is_plausible_email(value, ok):
    assert is_plausible_email(value) is ok


def test_sanitize_filename_and_disposition():
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert sanitize_filename("C:\\Users\\me\\notes.txt") == "notes.txt"
    assert sanitize_filename("..", fallback="att-1") == "att-1"
    header = build_content_disposition("r\u00e9sum\u00e9.pdf")
    assert header.startswith('attachment; filename="rsum.pdf"')
    assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in header
