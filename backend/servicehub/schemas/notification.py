# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """Response schema for a notification."""

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    body: str
    type: str
    entity_type: str | None
    entity_id: uuid.UUID | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    """A user's notifications, newest first."""

    items: list[NotificationResponse]
    total: int


class UnreadCountResponse(BaseModel):
    """Number of unread notifications."""

    count: int
