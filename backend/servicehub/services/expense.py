# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlmodel import col

from servicehub.exceptions import ConflictError, ForbiddenError, NotFoundError
from servicehub.models.enums import (
    AuditAction,
    AuditEntityType,
    ExpenseAction,
    ExpenseStatus,
    HistoryAction,
    NotificationType,
    UserRole,
)
from servicehub.models.expense import Expense, ExpenseApproval
from servicehub.schemas.expense import ExpenseListResponse, ExpenseResponse
from servicehub.schemas.leave import ApprovalEntryResponse
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services.audit import model_to_audit_dict
from servicehub.services.employee import get_employee_service, list_ids_with_role, resolve_display_name
from servicehub.services.workflow import (
    EXPENSE_APPROVER_ROLES,
    EXPENSE_PAYER_ROLES,
    NotificationDraft,
    WorkflowEvent,
    authorize,
    has_role,
    next_expense_status,
    next_history_sequence,
    run_post_commit_hooks,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.schemas.auth import AuthContext
    from servicehub.schemas.expense import ExpenseTransitionPayload, MarkPaidPayload, SubmitExpensePayload

logger = logging.getLogger(__name__)

_ACTION_TO_HISTORY = {
    ExpenseAction.APPROVE: HistoryAction.APPROVE,
    ExpenseAction.REJECT: HistoryAction.REJECT,
}
_ACTION_TO_AUDIT = {
    ExpenseAction.APPROVE: AuditAction.APPROVE,
    ExpenseAction.REJECT: AuditAction.REJECT,
}
_PAST_TENSE = {
    ExpenseAction.APPROVE: "approved",
    ExpenseAction.REJECT: "rejected",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_expense_response(expense: Expense, history: list[ExpenseApproval]) -> ExpenseResponse:
    """Map an expense model and its approval chain to the response schema."""
    return ExpenseResponse(
        id=expense.id,
        company_id=expense.company_id,
        submitted_by=expense.submitted_by,
        submitted_by_name=expense.submitted_by_name,
        manager_id=expense.manager_id,
        title=expense.title,
        description=expense.description,
        amount=expense.amount,
        currency=expense.currency,
        category=expense.category,
        receipt_uri=expense.receipt_uri,
        status=ExpenseStatus(expense.status),
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
        created_at=expense.created_at,
        updated_at=expense.updated_at,
    )


async def _get_expense_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    expense_id: uuid.UUID,
    *filters: ColumnElement[bool],
) -> Expense:
    """Fetch an expense scoped to company. Raises NotFoundError if missing or filtered out."""
    result = await session.execute(
        select(Expense).where(
            col(Expense.id) == expense_id,
            col(Expense.company_id) == company_id,
            *filters,
        )
    )
    expense = result.scalar_one_or_none()
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


async def _get_history(session: AsyncSession, expense_id: uuid.UUID) -> list[ExpenseApproval]:
    """Return the approval chain for an expense in order."""
    result = await session.execute(
        select(ExpenseApproval)
        .where(col(ExpenseApproval.expense_id) == expense_id)
        .order_by(col(ExpenseApproval.sequence))
    )
    return list(result.scalars().all())


async def _finance_recipients(company_id: uuid.UUID, *exclude: uuid.UUID) -> list[uuid.UUID]:
    return [uid for uid in await list_ids_with_role(company_id, UserRole.FINANCE_ADMIN) if uid not in exclude]


def expense_visibility_filters(auth: AuthContext) -> list[ColumnElement[bool]]:
    """Row filters limiting expenses to those the caller may read."""
    if has_role(auth.role, {UserRole.FINANCE_ADMIN}):
        return []
    if auth.role == UserRole.MANAGER:
        return [or_(col(Expense.manager_id) == auth.user_id, col(Expense.submitted_by) == auth.user_id)]
    return [col(Expense.submitted_by) == auth.user_id]


async def _append_history(
    session: AsyncSession,
    expense: Expense,
    auth: AuthContext,
    action: HistoryAction,
    comment: str,
) -> str:
    """Stage the next approval chain entry and return the actor's display name."""
    actor_name = await resolve_display_name(auth.company_id, auth.user_id)
    sequence = await next_history_sequence(session, col(ExpenseApproval.expense_id), expense.id)
    session.add(
        ExpenseApproval(
            expense_id=expense.id,
            sequence=sequence,
            approver_id=auth.user_id,
            approver_name=actor_name,
            action=action.value,
            comment=comment,
        )
    )
    return actor_name


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_expense(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitExpensePayload,
) -> ExpenseResponse:
    """Submit an expense claim for the calling employee.

    Routed like leave: to the manager when there is one, otherwise directly
    to finance. The amount is stored as given; no conversion or rounding.
    """
    employee = await get_employee_service().get_employee(auth.company_id, auth.user_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    status = ExpenseStatus.PENDING_MANAGER if employee.manager_id else ExpenseStatus.PENDING_FINANCE
    expense = Expense(
        company_id=auth.company_id,
        submitted_by=employee.id,
        submitted_by_name=employee.name,
        manager_id=employee.manager_id,
        title=payload.title,
        description=payload.description,
        amount=payload.amount,
        currency=payload.currency,
        category=payload.category,
        receipt_uri=payload.receipt_uri,
        status=status.value,
    )
    session.add(expense)
    await session.flush()

    submit_entry = ExpenseApproval(
        expense_id=expense.id,
        sequence=1,
        approver_id=employee.id,
        approver_name=employee.name,
        action=HistoryAction.SUBMIT.value,
        comment="Submitted",
    )
    session.add(submit_entry)
    await session.commit()
    await session.refresh(expense)

    response = _build_expense_response(expense, [submit_entry])
    logger.info("Expense %s submitted by %s with status %s", expense.id, employee.id, status)

    body = f"{employee.name} submitted an expense: {payload.title}"
    if employee.manager_id is not None:
        recipients = [employee.manager_id]
    else:
        recipients = await _finance_recipients(auth.company_id, employee.id)

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.EXPENSE,
            entity_id=expense.id,
            action=AuditAction.CREATE,
            details=f"Created expense: {payload.title} ({payload.amount} {payload.currency})",
            notifications=tuple(
                NotificationDraft(uid, "Expense Submitted", body, NotificationType.ACTION_REQUIRED)
                for uid in recipients
            ),
            after_json=model_to_audit_dict(expense),
        ),
    )
    return response


async def transition_expense(
    session: AsyncSession,
    auth: AuthContext,
    expense_id: uuid.UUID,
    payload: ExpenseTransitionPayload,
) -> TransitionResponse:
    """Apply an approver's action to an expense claim."""
    authorize(auth, EXPENSE_APPROVER_ROLES, "act on expenses")
    expense = await _get_expense_or_404(session, auth.company_id, expense_id)
    if auth.role == UserRole.MANAGER and expense.manager_id != auth.user_id:
        raise ForbiddenError("Only the submitter's manager can act on this expense")

    current = ExpenseStatus(expense.status)
    new_status = next_expense_status(current, auth.role, payload.action)

    before_dict = model_to_audit_dict(expense)
    expense.status = new_status.value
    expense.updated_at = datetime.now(UTC)
    actor_name = await _append_history(session, expense, auth, _ACTION_TO_HISTORY[payload.action], payload.comment)
    await session.commit()
    await session.refresh(expense)

    after_dict = model_to_audit_dict(expense)
    logger.info("Expense %s moved %s -> %s by %s (%s)", expense.id, current, new_status, auth.user_id, auth.role)

    past = _PAST_TENSE[payload.action]
    if new_status == ExpenseStatus.PENDING_FINANCE:
        drafts = [
            NotificationDraft(
                expense.submitted_by,
                "Expense Forwarded to Finance",
                f'Your expense "{expense.title}" was approved by {actor_name} and sent to finance',
            )
        ]
        drafts.extend(
            NotificationDraft(
                uid,
                "Expense Awaiting Finance",
                f'{expense.submitted_by_name}\'s expense "{expense.title}" needs finance review',
                NotificationType.ACTION_REQUIRED,
            )
            for uid in await _finance_recipients(auth.company_id, expense.submitted_by, auth.user_id)
        )
    else:
        drafts = [
            NotificationDraft(
                expense.submitted_by,
                f"Expense {past.capitalize()}",
                f'Your expense "{expense.title}" has been {past} by {actor_name}',
            )
        ]

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.EXPENSE,
            entity_id=expense.id,
            action=_ACTION_TO_AUDIT[payload.action],
            details=payload.comment or f"Expense {payload.action}",
            notifications=tuple(drafts),
            before_json=before_dict,
            after_json=after_dict,
        ),
    )
    return TransitionResponse(id=expense_id, status=new_status.value, message=f"Expense {past} successfully")


async def mark_expense_paid(
    session: AsyncSession,
    auth: AuthContext,
    expense_id: uuid.UUID,
    payload: MarkPaidPayload | None = None,
) -> TransitionResponse:
    """Record reimbursement of an approved expense (finance only)."""
    authorize(auth, EXPENSE_PAYER_ROLES, "mark expenses as paid")
    expense = await _get_expense_or_404(session, auth.company_id, expense_id)
    if expense.status != ExpenseStatus.APPROVED.value:
        raise ConflictError("Only approved expenses can be marked as paid")

    comment = payload.comment if payload else ""
    before_dict = model_to_audit_dict(expense)
    expense.status = ExpenseStatus.PAID.value
    expense.updated_at = datetime.now(UTC)
    await _append_history(session, expense, auth, HistoryAction.PAY, comment)
    await session.commit()
    await session.refresh(expense)

    after_dict = model_to_audit_dict(expense)
    logger.info("Expense %s marked paid by %s", expense.id, auth.user_id)

    await run_post_commit_hooks(
        session,
        WorkflowEvent(
            company_id=auth.company_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.EXPENSE,
            entity_id=expense.id,
            action=AuditAction.PAY,
            details=comment or f"Paid {expense.amount} {expense.currency}",
            notifications=(
                NotificationDraft(
                    expense.submitted_by,
                    "Expense Paid",
                    f'Your expense "{expense.title}" has been reimbursed',
                ),
            ),
            before_json=before_dict,
            after_json=after_dict,
        ),
    )
    return TransitionResponse(id=expense_id, status=ExpenseStatus.PAID.value, message="Expense marked as paid")


async def get_expense(
    session: AsyncSession,
    auth: AuthContext,
    expense_id: uuid.UUID,
) -> ExpenseResponse:
    """Get a single expense with its approval history."""
    expense = await _get_expense_or_404(session, auth.company_id, expense_id, *expense_visibility_filters(auth))
    history = await _get_history(session, expense.id)
    return _build_expense_response(expense, history)


async def list_expenses(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: ExpenseStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> ExpenseListResponse:
    """List expenses visible to the caller, newest first."""
    base_filters = [col(Expense.company_id) == auth.company_id, *expense_visibility_filters(auth)]
    if status_filter is not None:
        base_filters.append(col(Expense.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(Expense).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Expense).where(*base_filters).order_by(col(Expense.created_at).desc()).offset(offset).limit(limit)
    )
    expenses = list(result.scalars().all())
    return ExpenseListResponse(
        items=[_build_expense_response(expense, await _get_history(session, expense.id)) for expense in expenses],
        total=total,
    )
