# basedpyright: reportAssignmentType=false
# basedpyright: reportIncompatibleVariableOverride=false

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def assume_utc(dt: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes even for timezone-aware columns.
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class User(SQLModel, table=True):
    __tablename__ = "users"  # pyright: ignore[reportAssignmentType,reportIncompatibleVariableOverride]

    id: Optional[int] = Field(default=None, primary_key=True)

    # Display identity as entered; email_lower is the case-insensitive lookup key.
    email: str = Field(min_length=3, max_length=320)
    email_lower: str = Field(index=True, unique=True, min_length=3, max_length=320)
    name: str = Field(default="", max_length=100)

    # Bearer credential. Issuance lives in the external auth service.
    api_token: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)

