# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlmodel import col

from servicehub.exceptions import NotFoundError
from servicehub.models.notification import Notification
from servicehub.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.models.enums import AuditEntityType, NotificationType
    from servicehub.schemas.auth import AuthContext


def _build_notification_response(notification: Notification) -> NotificationResponse:
    """Map a notification model to its response schema."""
    return NotificationResponse(
        id=notification.id,
        user_id=notification.user_id,
        title=notification.title,
        body=notification.body,
        type=notification.type,
        entity_type=notification.entity_type,
        entity_id=notification.entity_id,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


def create_notification(
    session: AsyncSession,
    *,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    title: str,
    body: str,
    notification_type: NotificationType,
    entity_type: AuditEntityType | None = None,
    entity_id: uuid.UUID | None = None,
) -> Notification:
    """Stage a notification for a user on the caller's session."""
    notification = Notification(
        company_id=company_id,
        user_id=user_id,
        title=title,
        body=body,
        type=notification_type.value,
        entity_type=entity_type.value if entity_type is not None else None,
        entity_id=entity_id,
    )
    session.add(notification)
    return notification


async def list_notifications(
    session: AsyncSession,
    auth: AuthContext,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    filters = [
        col(Notification.company_id) == auth.company_id,
        col(Notification.user_id) == auth.user_id,
    ]
    if unread_only:
        filters.append(col(Notification.is_read).is_(False))

    count_result = await session.execute(select(func.count()).select_from(Notification).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Notification)
        .where(*filters)
        .order_by(col(Notification.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return NotificationListResponse(
        items=[_build_notification_response(n) for n in result.scalars().all()],
        total=total,
    )


async def get_unread_count(session: AsyncSession, auth: AuthContext) -> UnreadCountResponse:
    """Count the caller's unread notifications."""
    result = await session.execute(
        select(func.count())
        .select_from(Notification)
        .where(
            col(Notification.company_id) == auth.company_id,
            col(Notification.user_id) == auth.user_id,
            col(Notification.is_read).is_(False),
        )
    )
    return UnreadCountResponse(count=result.scalar_one())


async def mark_notification_read(
    session: AsyncSession,
    auth: AuthContext,
    notification_id: uuid.UUID,
) -> NotificationResponse:
    """Mark one of the caller's notifications as read.

    Notifications addressed to someone else are reported as not found.
    """
    result = await session.execute(
        select(Notification).where(
            col(Notification.id) == notification_id,
            col(Notification.company_id) == auth.company_id,
            col(Notification.user_id) == auth.user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")

    notification.is_read = True
    await session.commit()
    await session.refresh(notification)
    return _build_notification_response(notification)


async def mark_all_read(session: AsyncSession, auth: AuthContext) -> UnreadCountResponse:
    """Mark every unread notification of the caller as read."""
    await session.execute(
        update(Notification)
        .where(
            col(Notification.company_id) == auth.company_id,
            col(Notification.user_id) == auth.user_id,
            col(Notification.is_read).is_(False),
        )
        .values(is_read=True)
    )
    await session.commit()
    return UnreadCountResponse(count=0)
