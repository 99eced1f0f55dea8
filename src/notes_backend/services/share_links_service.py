"""Public, view-only share links.

The plaintext token is returned exactly once, at issuance. Only an HMAC of it
(keyed with SHARE_TOKEN_SECRET) is stored on the note, so a database leak does
not leak working links. Issuing a new link replaces the previous one.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from notes_backend.config import settings
from notes_backend.errors import DomainError, GoneError, InvalidArgumentError, NotFoundError
from notes_backend.models import User, assume_utc, utc_now
from notes_backend.models_notes import Note, NoteAttachment
from notes_backend.repositories import attachments_repo, notes_repo, users_repo
from notes_backend.services import access_service
from notes_backend.services.note_writes import run_note_write

logger = logging.getLogger(__name__)

# 32 random bytes -> 256 bits of entropy.
_TOKEN_BYTES = 32
_TOKEN_PREFIX_LEN = 8


@dataclass(frozen=True)
class IssuedLink:
    token: str
    share_url: str
    expires_at: datetime | None


@dataclass(frozen=True)
class SharedNoteView:
    note: Note
    owner: User | None
    attachments: list[NoteAttachment]


def _compute_token_hmac_hex(*, token: str) -> str:
    secret = settings.share_token_secret.strip()
    if not secret:
        raise DomainError("share token secret not configured")
    return hmac.new(secret.encode("utf-8"), token.encode("utf-8"), hashlib.sha256).hexdigest()


def build_share_url(*, token: str) -> str:
    base = settings.public_base_url.rstrip("/")
    return f"{base}/shared/{token}"


async def issue_link(
    *,
    session: AsyncSession,
    owner_id: int,
    note_id: str,
    ttl_hours: int | None,
) -> IssuedLink:
    if ttl_hours is not None:
        max_ttl = int(settings.share_link_max_ttl_hours)
        if ttl_hours <= 0 or ttl_hours > max_ttl:
            raise InvalidArgumentError(f"ttl_hours must be between 1 and {max_ttl}")

    token = secrets.token_urlsafe(_TOKEN_BYTES)
    token_hmac = _compute_token_hmac_hex(token=token)

    async def _unit(note: Note) -> IssuedLink:
        access_service.require_owner(note, user_id=owner_id, action="create a share link")
        expires_at = utc_now() + timedelta(hours=ttl_hours) if ttl_hours is not None else None
        note.share_token_hmac = token_hmac
        note.share_token_prefix = token[:_TOKEN_PREFIX_LEN]
        note.share_token_expires_at = expires_at
        session.add(note)
        return IssuedLink(token=token, share_url=build_share_url(token=token), expires_at=expires_at)

    issued = await run_note_write(session, note_id=note_id, unit=_unit, op="issue_link")
    logger.info("share link issued note_id=%s expires_at=%s", note_id, issued.expires_at)
    return issued


async def revoke_link(*, session: AsyncSession, owner_id: int, note_id: str) -> None:
    async def _unit(note: Note) -> None:
        access_service.require_owner(note, user_id=owner_id, action="revoke the share link")
        note.share_token_hmac = None
        note.share_token_prefix = None
        note.share_token_expires_at = None
        session.add(note)

    await run_note_write(session, note_id=note_id, unit=_unit, op="revoke_link")


async def resolve_link(*, session: AsyncSession, token: str) -> SharedNoteView:
    """Unknown (or revoked) token -> NotFound; expired -> Gone."""
    value = (token or "").strip()
    if not value:
        raise NotFoundError("share link not found")

    token_hmac = _compute_token_hmac_hex(token=value)
    note = await notes_repo.get_note_by_share_token(session, token_hmac=token_hmac)
    if note is None or note.share_token_hmac is None:
        raise NotFoundError("share link not found")

    # Constant-time compare even though SQL already matched.
    if not hmac.compare_digest(note.share_token_hmac, token_hmac):
        raise NotFoundError("share link not found")

    expires_at = assume_utc(note.share_token_expires_at)
    if expires_at is not None and expires_at < utc_now():
        raise GoneError("share link expired")

    owner = await users_repo.get_user(session, user_id=note.user_id)
    attachments = await attachments_repo.list_attachments_for_note(session, note_id=note.id)
    return SharedNoteView(note=note, owner=owner, attachments=attachments)
