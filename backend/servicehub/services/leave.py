# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlmodel import col

from servicehub.config import get_settings
from servicehub.exceptions import ForbiddenError, NotFoundError
from servicehub.models.balance import LeaveBalance
from servicehub.models.enums import (
    AuditAction,
    AuditEntityType,
    HistoryAction,
    LeaveAction,
    LeaveStatus,
    LeaveType,
    NotificationType,
    UserRole,
)
from servicehub.models.leave import Leave, LeaveApproval
from servicehub.schemas.leave import (
    ApprovalEntryResponse,
    LeaveBalanceResponse,
    LeaveListResponse,
    LeaveResponse,
)
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services.audit import model_to_audit_dict
from servicehub.services.employee import get_employee_service, list_ids_with_role, resolve_display_name
from servicehub.services.workflow import (
    LEAVE_APPROVER_ROLES,
    NotificationDraft,
    WorkflowEvent,
    authorize,
    has_role,
    next_history_sequence,
    next_leave_status,
    run_post_commit_hooks,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.schemas.auth import AuthContext
    from servicehub.schemas.leave import LeaveTransitionPayload, SubmitLeavePayload

logger = logging.getLogger(__name__)

_ACTION_TO_HISTORY = {
    LeaveAction.APPROVE: HistoryAction.APPROVE,
    LeaveAction.REJECT: HistoryAction.REJECT,
    LeaveAction.ESCALATE: HistoryAction.ESCALATE,
}
_ACTION_TO_AUDIT = {
    LeaveAction.APPROVE: AuditAction.APPROVE,
    LeaveAction.REJECT: AuditAction.REJECT,
    LeaveAction.ESCALATE: AuditAction.ESCALATE,
}
_PAST_TENSE = {
    LeaveAction.APPROVE: "approved",
    LeaveAction.REJECT: "rejected",
    LeaveAction.ESCALATE: "escalated",
}

# Employee-facing message per resulting status.
_STATUS_MESSAGES = {
    LeaveStatus.PENDING_HR: ("Leave Forwarded to HR", "Your {leave_type} leave was approved by {actor} and sent to HR"),
    LeaveStatus.APPROVED: ("Leave Approved", "Your {leave_type} leave has been approved by {actor}"),
    LeaveStatus.REJECTED: ("Leave Rejected", "Your {leave_type} leave has been rejected by {actor}"),
    LeaveStatus.ESCALATED: ("Leave Escalated", "Your {leave_type} leave has been escalated by {actor}"),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(leave: Leave, history: list[LeaveApproval]) -> LeaveResponse:
    """Map a leave model and its approval chain to the response schema."""
    return LeaveResponse(
        id=leave.id,
        company_id=leave.company_id,
        employee_id=leave.employee_id,
        employee_name=leave.employee_name,
        manager_id=leave.manager_id,
        leave_type=LeaveType(leave.leave_type),
        start_date=leave.start_date,
        end_date=leave.end_date,
        reason=leave.reason,
        status=LeaveStatus(leave.status),
        approval_history=[
            ApprovalEntryResponse(
                id=entry.id,
                sequence=entry.sequence,
                approver_id=entry.approver_id,
                approver_name=entry.approver_name,
                action=entry.action,
                comment=entry.comment,
                created_at=entry.created_at,
            )
            for entry in history
        ],
        created_at=leave.created_at,
        updated_at=leave.updated_at,
    )


async def _get_leave_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    leave_id: uuid.UUID,
    *filters: ColumnElement[bool],
) -> Leave:
    """Fetch a leave request scoped to company. Raises NotFoundError if missing or filtered out."""
    result = await session.execute(
        select(Leave).where(
            col(Leave.id) == leave_id,
            col(Leave.company_id) == company_id,
            *filters,
        )
    )
    leave = result.scalar_one_or_none()
    if leave is None:
        raise NotFoundError("Leave request not found")
    return leave


async def _get_history(session: AsyncSession, leave_id: uuid.UUID) -> list[LeaveApproval]:
    """Return the approval chain for a leave request in order."""
    result = await session.execute(
        select(LeaveApproval).where(col(LeaveApproval.leave_id) == leave_id).order_by(col(LeaveApproval.sequence))
    )
    return list(result.scalars().all())


async def _hr_recipients(company_id: uuid.UUID, *exclude: uuid.UUID) -> list[uuid.UUID]:
    return [uid for uid in await list_ids_with_role(company_id, UserRole.HR_ADMIN) if uid not in exclude]


def leave_visibility_filters(auth: AuthContext) -> list[ColumnElement[bool]]:
    """Row filters limiting leave requests to those the caller may read.

    HR sees every request, a manager sees those routed to them plus their
    own, everybody else sees their own.
    """
    if has_role(auth.role, {UserRole.HR_ADMIN}):
        return []
    if auth.role == UserRole.MANAGER:
        return [or_(col(Leave.manager_id) == auth.user_id, col(Leave.employee_id) == auth.user_id)]
    return [col(Leave.employee_id) == auth.user_id]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
) -> LeaveResponse:
    """Submit a leave request for the calling employee.

    The request is routed to the employee's manager when the directory lists
    one, otherwise straight to HR. The synthetic ``submit`` history entry is
    written in the same transaction as the request.
    """
    employee = await get_employee_service().get_employee(auth.company_id, auth.user_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    status = LeaveStatus.PENDING_MANAGER if employee.manager_id else LeaveStatus.PENDING_HR
    leave = Leave(
        company_id=auth.company_id,
        employee_id=employee.id,
        employee_name=employee.name,
        manager_id=employee.manager_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        status=status.value,
    )
    session.add(leave)
    await session.flush()

    submit_entry = LeaveApproval(
        leave_id=leave.id,
        sequence=1,
        approver_id=employee.id,
        approver_name=employee.name,
        action=HistoryAction.SUBMIT.value,
        comment="Submitted for approval",
    )
    session.add(submit_entry)
    await session.commit()
    await session.refresh(leave)

    response = _build_leave_response(leave, [submit_entry])
    logger.info("Leave %s submitted by %s with status %s", leave.id, employee.id, status)

    body = f"{employee.name} has submitted a {payload.leave_type} leave request"
    if employee.manager_id is not None:
        drafts = [NotificationDraft(employee.manager_id, "Leave Request", body, NotificationType.ACTION_REQUIRED)]
    else:
        drafts = [
            NotificationDraft(uid, "Leave Request", body, NotificationType.ACTION_REQUIRED)
            for uid in await _hr_recipients(auth.company_id, employee.id)
        ]

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE,
            entity_id=leave.id,
            action=AuditAction.CREATE,
            details=f"Created {payload.leave_type} leave",
            notifications=tuple(drafts),
            after_json=model_to_audit_dict(leave),
        ),
    )
    return response


async def transition_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    payload: LeaveTransitionPayload,
) -> TransitionResponse:
    """Apply an approver's action to a leave request.

    Status update and history append are committed together; notifications
    and audit follow as best-effort hooks.
    """
    authorize(auth, LEAVE_APPROVER_ROLES, "act on leave requests")
    leave = await _get_leave_or_404(session, auth.company_id, leave_id)
    if auth.role == UserRole.MANAGER and leave.manager_id != auth.user_id:
        raise ForbiddenError("Only the employee's manager can act on this leave request")

    current = LeaveStatus(leave.status)
    new_status = next_leave_status(current, auth.role, payload.action)

    before_dict = model_to_audit_dict(leave)
    actor_name = await resolve_display_name(auth.company_id, auth.user_id)
    sequence = await next_history_sequence(session, col(LeaveApproval.leave_id), leave.id)

    leave.status = new_status.value
    leave.updated_at = datetime.now(UTC)
    session.add(
        LeaveApproval(
            leave_id=leave.id,
            sequence=sequence,
            approver_id=auth.user_id,
            approver_name=actor_name,
            action=_ACTION_TO_HISTORY[payload.action].value,
            comment=payload.comment,
        )
    )
    await session.commit()
    await session.refresh(leave)

    after_dict = model_to_audit_dict(leave)
    logger.info("Leave %s moved %s -> %s by %s (%s)", leave.id, current, new_status, auth.user_id, auth.role)

    title, template = _STATUS_MESSAGES[new_status]
    drafts = [
        NotificationDraft(
            leave.employee_id,
            title,
            template.format(leave_type=leave.leave_type, actor=actor_name),
        )
    ]
    if new_status in (LeaveStatus.PENDING_HR, LeaveStatus.ESCALATED):
        notification_type = (
            NotificationType.ESCALATION if new_status == LeaveStatus.ESCALATED else NotificationType.ACTION_REQUIRED
        )
        body = f"{leave.employee_name}'s {leave.leave_type} leave needs HR review"
        drafts.extend(
            NotificationDraft(uid, "Leave Awaiting HR", body, notification_type)
            for uid in await _hr_recipients(auth.company_id, leave.employee_id, auth.user_id)
        )

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE,
            entity_id=leave.id,
            action=_ACTION_TO_AUDIT[payload.action],
            details=payload.comment or f"Leave {payload.action}",
            notifications=tuple(drafts),
            before_json=before_dict,
            after_json=after_dict,
        ),
    )
    return TransitionResponse(
        id=leave_id,
        status=new_status.value,
        message=f"Leave {_PAST_TENSE[payload.action]} successfully",
    )


async def get_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
) -> LeaveResponse:
    """Get a single leave request with its approval history."""
    leave = await _get_leave_or_404(session, auth.company_id, leave_id, *leave_visibility_filters(auth))
    history = await _get_history(session, leave.id)
    return _build_leave_response(leave, history)


async def list_leaves(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: LeaveStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveListResponse:
    """List leave requests visible to the caller, newest first."""
    base_filters = [col(Leave.company_id) == auth.company_id, *leave_visibility_filters(auth)]
    if status_filter is not None:
        base_filters.append(col(Leave.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(Leave).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Leave).where(*base_filters).order_by(col(Leave.created_at).desc()).offset(offset).limit(limit)
    )
    leaves = list(result.scalars().all())
    return LeaveListResponse(
        items=[_build_leave_response(leave, await _get_history(session, leave.id)) for leave in leaves],
        total=total,
    )


async def get_leave_balance(session: AsyncSession, auth: AuthContext) -> LeaveBalanceResponse:
    """Return the caller's leave balance, creating the default allowance on first read."""
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.company_id) == auth.company_id,
            col(LeaveBalance.employee_id) == auth.user_id,
        )
    )
    balance = result.scalar_one_or_none()
    if balance is None:
        settings = get_settings()
        balance = LeaveBalance(
            company_id=auth.company_id,
            employee_id=auth.user_id,
            annual=settings.default_annual_days,
            sick=settings.default_sick_days,
            personal=settings.default_personal_days,
        )
        session.add(balance)
        await session.commit()
        await session.refresh(balance)
    return LeaveBalanceResponse(
        employee_id=balance.employee_id,
        annual=balance.annual,
        sick=balance.sick,
        personal=balance.personal,
    )
