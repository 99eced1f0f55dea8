from __future__ import annotations

from .ai import (
    AIContentRequest,
    AITagsRequest,
    GeneratedTitle,
    ImprovedText,
    NoteSummary,
    SuggestedTags,
)
from .attachments import Attachment
from .common import HealthResponse
from .errors import ErrorResponse
from .notes import Note, NoteCreateRequest, NoteList, NotePatchRequest
from .notifications import Notification, NotificationListResponse, UnreadCountResponse
from .shares import (
    PendingShare,
    PendingShareList,
    ShareGrant,
    ShareGrantList,
    ShareGrantRequest,
    ShareGrantResult,
    SharedNote,
    SharedWithMeList,
    SharedWithMeNote,
    ShareLinkCreated,
    ShareLinkRequest,
    ShareRespondRequest,
    ShareRespondResult,
)
from .versions import NoteVersion, NoteVersionList, NoteVersionSummary

__all__ = [
    "AIContentRequest",
    "AITagsRequest",
    "Attachment",
    "ErrorResponse",
    "GeneratedTitle",
    "HealthResponse",
    "ImprovedText",
    "Note",
    "NoteCreateRequest",
    "NoteList",
    "NotePatchRequest",
    "NoteSummary",
    "NoteVersion",
    "NoteVersionList",
    "NoteVersionSummary",
    "Notification",
    "NotificationListResponse",
    "PendingShare",
    "PendingShareList",
    "ShareGrant",
    "ShareGrantList",
    "ShareGrantRequest",
    "ShareGrantResult",
    "ShareLinkCreated",
    "ShareLinkRequest",
    "ShareRespondRequest",
    "ShareRespondResult",
    "SharedNote",
    "SharedWithMeList",
    "SharedWithMeNote",
    "SuggestedTags",
    "UnreadCountResponse",
]
