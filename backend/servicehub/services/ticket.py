# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlmodel import col

from servicehub.exceptions import NotFoundError, ValidationError
from servicehub.models.enums import (
    AuditAction,
    AuditEntityType,
    NotificationType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    UserRole,
)
from servicehub.models.ticket import Ticket, TicketComment
from servicehub.schemas.ticket import CommentResponse, TicketListResponse, TicketResponse
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services.audit import model_to_audit_dict
from servicehub.services.employee import get_employee_service, list_ids_with_role, resolve_display_name
from servicehub.services.sla import compute_sla_deadline, is_sla_breached, sla_remaining
from servicehub.services.workflow import (
    TICKET_AGENT_ROLES,
    NotificationDraft,
    WorkflowEvent,
    authorize,
    check_ticket_transition,
    has_role,
    next_history_sequence,
    notification_recipients,
    run_post_commit_hooks,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.schemas.auth import AuthContext
    from servicehub.schemas.ticket import AddCommentPayload, CreateTicketPayload, TicketStatusPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_comment_response(comment: TicketComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        ticket_id=comment.ticket_id,
        sequence=comment.sequence,
        author_id=comment.author_id,
        author_name=comment.author_name,
        content=comment.content,
        is_system=comment.is_system,
        created_at=comment.created_at,
    )


def _build_ticket_response(
    ticket: Ticket,
    comments: list[TicketComment],
    now: datetime | None = None,
) -> TicketResponse:
    """Map a ticket to its response, deriving SLA remaining time at ``now``."""
    if now is None:
        now = datetime.now(UTC)
    remaining = sla_remaining(ticket.sla_deadline, now)
    return TicketResponse(
        id=ticket.id,
        company_id=ticket.company_id,
        created_by=ticket.created_by,
        created_by_name=ticket.created_by_name,
        assignee_id=ticket.assignee_id,
        title=ticket.title,
        description=ticket.description,
        category=TicketCategory(ticket.category),
        priority=TicketPriority(ticket.priority),
        status=TicketStatus(ticket.status),
        sla_deadline=ticket.sla_deadline,
        sla_remaining_seconds=int(remaining.total_seconds()),
        sla_breached=is_sla_breached(ticket.sla_deadline, now),
        comments=[_build_comment_response(c) for c in comments],
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
    )


async def _get_ticket_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    ticket_id: uuid.UUID,
    *filters: ColumnElement[bool],
) -> Ticket:
    """Fetch a ticket scoped to company. Raises NotFoundError if missing or filtered out."""
    result = await session.execute(
        select(Ticket).where(
            col(Ticket.id) == ticket_id,
            col(Ticket.company_id) == company_id,
            *filters,
        )
    )
    ticket = result.scalar_one_or_none()
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


def ticket_visibility_filters(auth: AuthContext) -> list[ColumnElement[bool]]:
    """Row filters limiting tickets to those the caller created or is assigned, unless IT."""
    if has_role(auth.role, TICKET_AGENT_ROLES):
        return []
    return [or_(col(Ticket.created_by) == auth.user_id, col(Ticket.assignee_id) == auth.user_id)]


async def _get_comments(session: AsyncSession, ticket_id: uuid.UUID) -> list[TicketComment]:
    result = await session.execute(
        select(TicketComment)
        .where(col(TicketComment.ticket_id) == ticket_id)
        .order_by(col(TicketComment.sequence))
    )
    return list(result.scalars().all())


async def _append_comment(
    session: AsyncSession,
    ticket: Ticket,
    auth: AuthContext,
    content: str,
    is_system: bool = False,
) -> TicketComment:
    sequence = await next_history_sequence(session, col(TicketComment.ticket_id), ticket.id)
    comment = TicketComment(
        ticket_id=ticket.id,
        sequence=sequence,
        author_id=auth.user_id,
        author_name=await resolve_display_name(auth.company_id, auth.user_id),
        content=content,
        is_system=is_system,
    )
    session.add(comment)
    return comment


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_ticket(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateTicketPayload,
) -> TicketResponse:
    """Open a support ticket and fix its SLA deadline from the priority."""
    now = datetime.now(UTC)
    ticket = Ticket(
        company_id=auth.company_id,
        created_by=auth.user_id,
        created_by_name=await resolve_display_name(auth.company_id, auth.user_id),
        title=payload.title,
        description=payload.description,
        category=payload.category.value,
        priority=payload.priority.value,
        status=TicketStatus.OPEN.value,
        sla_deadline=compute_sla_deadline(payload.priority, now),
        created_at=now,
        updated_at=now,
    )
    session.add(ticket)
    await session.commit()
    await session.refresh(ticket)

    response = _build_ticket_response(ticket, [])
    logger.info("Ticket %s opened by %s (%s, due %s)", ticket.id, auth.user_id, payload.priority, ticket.sla_deadline)

    it_admins = await list_ids_with_role(auth.company_id, UserRole.IT_ADMIN)
    body = f"{ticket.created_by_name} opened a {payload.priority} {payload.category} ticket: {payload.title}"
    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.TICKET,
            entity_id=ticket.id,
            action=AuditAction.CREATE,
            details=f"Created ticket: {payload.title}",
            notifications=tuple(
                NotificationDraft(uid, "New Support Ticket", body, NotificationType.ACTION_REQUIRED)
                for uid in notification_recipients(*it_admins, exclude=auth.user_id)
            ),
            after_json=model_to_audit_dict(ticket),
        ),
    )
    return response


async def transition_ticket(
    session: AsyncSession,
    auth: AuthContext,
    ticket_id: uuid.UUID,
    payload: TicketStatusPayload,
) -> TransitionResponse:
    """Move a ticket to a new status, optionally reassigning it (IT only)."""
    authorize(auth, TICKET_AGENT_ROLES, "update ticket status")
    ticket = await _get_ticket_or_404(session, auth.company_id, ticket_id)

    current = TicketStatus(ticket.status)
    reassigning = payload.assignee_id is not None and payload.assignee_id != ticket.assignee_id
    check_ticket_transition(current, payload.status, reassigning=reassigning)

    assignee_name = None
    if payload.assignee_id is not None:
        assignee = await get_employee_service().get_employee(auth.company_id, payload.assignee_id)
        if assignee is None:
            raise ValidationError("Assignee not found")
        assignee_name = assignee.name
    if payload.status == TicketStatus.ASSIGNED and (payload.assignee_id or ticket.assignee_id) is None:
        raise ValidationError("An assignee is required to assign a ticket")

    before_dict = model_to_audit_dict(ticket)
    ticket.status = payload.status.value
    if reassigning:
        ticket.assignee_id = payload.assignee_id
    ticket.updated_at = datetime.now(UTC)

    note = f"Status changed from {current} to {payload.status}"
    if reassigning:
        note += f"; assigned to {assignee_name}"
    await _append_comment(session, ticket, auth, note, is_system=True)
    await session.commit()
    await session.refresh(ticket)

    after_dict = model_to_audit_dict(ticket)
    logger.info("Ticket %s moved %s -> %s by %s", ticket.id, current, payload.status, auth.user_id)

    if payload.status == TicketStatus.ESCALATED:
        creator_type = NotificationType.ESCALATION
    else:
        creator_type = NotificationType.STATUS_UPDATE
    drafts = [
        NotificationDraft(
            uid,
            "Ticket Updated",
            f'Ticket "{ticket.title}" is now {payload.status}',
            creator_type,
        )
        for uid in notification_recipients(ticket.created_by, exclude=auth.user_id)
    ]
    if reassigning:
        drafts.extend(
            NotificationDraft(
                uid,
                "Ticket Assigned",
                f'You have been assigned ticket "{ticket.title}"',
                NotificationType.ACTION_REQUIRED,
            )
            for uid in notification_recipients(ticket.assignee_id, exclude=auth.user_id)
        )

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.TICKET,
            entity_id=ticket.id,
            action=AuditAction.STATUS_CHANGE,
            details=note,
            notifications=tuple(drafts),
            before_json=before_dict,
            after_json=after_dict,
        ),
    )
    return TransitionResponse(id=ticket_id, status=payload.status.value, message=f"Ticket moved to {payload.status}")


async def comment_on_ticket(
    session: AsyncSession,
    auth: AuthContext,
    ticket_id: uuid.UUID,
    payload: AddCommentPayload,
) -> CommentResponse:
    """Append a user comment to a ticket.

    The creator and the assignee hear about it; the commenter does not.
    """
    ticket = await _get_ticket_or_404(session, auth.company_id, ticket_id)
    comment = await _append_comment(session, ticket, auth, payload.content)
    ticket.updated_at = datetime.now(UTC)
    await session.commit()
    await session.refresh(comment)

    response = _build_comment_response(comment)
    drafts = tuple(
        NotificationDraft(
            uid,
            "New Ticket Comment",
            f'{comment.author_name} commented on "{ticket.title}"',
        )
        for uid in notification_recipients(ticket.created_by, ticket.assignee_id, exclude=auth.user_id)
    )
    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.TICKET,
            entity_id=ticket.id,
            action=AuditAction.COMMENT,
            details=f"Comment #{comment.sequence}",
            notifications=drafts,
        ),
    )
    return response


async def get_ticket(
    session: AsyncSession,
    auth: AuthContext,
    ticket_id: uuid.UUID,
) -> TicketResponse:
    """Get a single ticket with its comments and live SLA figures."""
    ticket = await _get_ticket_or_404(session, auth.company_id, ticket_id, *ticket_visibility_filters(auth))
    return _build_ticket_response(ticket, await _get_comments(session, ticket.id))


async def list_tickets(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: TicketStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> TicketListResponse:
    """List tickets visible to the caller, newest first."""
    base_filters = [col(Ticket.company_id) == auth.company_id, *ticket_visibility_filters(auth)]
    if status_filter is not None:
        base_filters.append(col(Ticket.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(Ticket).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Ticket).where(*base_filters).order_by(col(Ticket.created_at).desc()).offset(offset).limit(limit)
    )
    now = datetime.now(UTC)
    items = [
        _build_ticket_response(ticket, await _get_comments(session, ticket.id), now)
        for ticket in result.scalars().all()
    ]
    return TicketListResponse(items=items, total=total)
