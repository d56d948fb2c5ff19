# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from servicehub.models.base import UTCDateTime, UUIDBase
from servicehub.models.enums import NotificationType


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Notification(UUIDBase, table=True):
    """In-app message addressed to a single user."""

    __tablename__ = "notification"
    __table_args__ = (sa.Index("ix_notification_user_read", "user_id", "is_read"),)

    company_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    title: str = Field(max_length=255)
    body: str
    type: str = Field(default=NotificationType.STATUS_UPDATE, max_length=50)
    entity_type: str | None = Field(default=None, max_length=50)
    entity_id: uuid.UUID | None = None
    is_read: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    created_at: datetime = Field(
        default_factory=_now_utc,
        index=True,
        sa_type=UTCDateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
