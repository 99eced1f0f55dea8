"""init: users, notes, grants, attachments, versions, notifications

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _index(table: str, *columns: str, unique: bool = False) -> None:
    name = f"ix_{table}_{'_'.join(columns)}"
    op.create_index(name, table, list(columns), unique=unique)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("email_lower", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("api_token", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    _index("users", "email_lower", unique=True)
    _index("users", "is_active")
    _index("users", "created_at")

    op.create_table(
        "notes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("tags_json", sa.JSON(), nullable=False),
        sa.Column("pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_status", sa.String(length=20), nullable=False, server_default="none"),
        sa.Column("share_token_hmac", sa.String(length=128), nullable=True),
        sa.Column("share_token_prefix", sa.String(length=32), nullable=True),
        sa.Column("share_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("share_token_hmac", name="uq_notes_share_token_hmac"),
    )
    _index("notes", "user_id")
    _index("notes", "pinned")
    _index("notes", "archived")
    _index("notes", "reminder_at")
    _index("notes", "reminder_status")
    _index("notes", "created_at")
    _index("notes", "updated_at")

    op.create_table(
        "note_shares",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("note_id", sa.String(length=36), sa.ForeignKey("notes.id"), nullable=False),
        sa.Column("grantee_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("permission", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("note_id", "grantee_user_id", name="uq_note_shares_note_grantee"),
    )
    _index("note_shares", "note_id")
    _index("note_shares", "grantee_user_id")
    _index("note_shares", "status")
    _index("note_shares", "granted_at")

    op.create_table(
        "note_attachments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("note_id", sa.String(length=36), sa.ForeignKey("notes.id"), nullable=False),
        sa.Column("uploader_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=False),
        sa.Column("storage_key", sa.String(length=512), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False, server_default="document"),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("content_type", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("storage_key", name="uq_note_attachments_storage_key"),
    )
    _index("note_attachments", "note_id")
    _index("note_attachments", "uploader_user_id")
    _index("note_attachments", "created_at")

    op.create_table(
        "note_versions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("note_id", sa.String(length=36), sa.ForeignKey("notes.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("tags_json", sa.JSON(), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("author_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("note_id", "version_number", name="uq_note_versions_note_number"),
    )
    _index("note_versions", "note_id")
    _index("note_versions", "version_number")
    _index("note_versions", "author_user_id")
    _index("note_versions", "created_at")

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("payload_json", sa.JSON(), nullable=False),
        sa.Column("dedupe_key", sa.String(length=200), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "dedupe_key", name="uq_notifications_user_dedupe_key"),
    )
    _index("notifications", "user_id")
    _index("notifications", "kind")
    _index("notifications", "read_at")
    _index("notifications", "created_at")
    _index("notifications", "updated_at")


def downgrade() -> None:
    for table in (
        "notifications",
        "note_versions",
        "note_attachments",
        "note_shares",
        "notes",
        "users",
    ):
        op.drop_table(table)
