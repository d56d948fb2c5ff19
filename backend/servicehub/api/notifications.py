# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from servicehub.api.deps import AuthDep, validate_company_scope
from servicehub.db import SessionDep
from servicehub.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from servicehub.services import notification as notification_service

notifications_router = APIRouter(
    prefix="/companies/{company_id}/notifications",
    tags=["notifications"],
    dependencies=[Depends(validate_company_scope)],
)


@notifications_router.get("", response_model=NotificationListResponse)
async def list_notifications(
    session: SessionDep,
    auth: AuthDep,
    unread_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    return await notification_service.list_notifications(session, auth, unread_only, offset, limit)


@notifications_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    session: SessionDep,
    auth: AuthDep,
) -> UnreadCountResponse:
    """Count the caller's unread notifications."""
    return await notification_service.get_unread_count(session, auth)


@notifications_router.post("/read-all", response_model=UnreadCountResponse)
async def mark_all_read(
    session: SessionDep,
    auth: AuthDep,
) -> UnreadCountResponse:
    """Mark all of the caller's notifications as read."""
    return await notification_service.mark_all_read(session, auth)


@notifications_router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> NotificationResponse:
    """Mark one notification as read."""
    return await notification_service.mark_notification_read(session, auth, notification_id)
