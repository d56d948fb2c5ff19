"""Approval workflow engine shared by the leave, expense and ticket domains.

The engine has three parts:

* role authorization, with SUPER_ADMIN as the override role;
* pure transition functions that map (current status, role, action) to the
  next status, raising ``ConflictError`` for moves the state machine forbids;
* a post-commit hook runner. Once a domain service has committed the status
  change and its history entry in one transaction, it hands a
  ``WorkflowEvent`` to ``run_post_commit_hooks``. Every hook (notifications,
  then audit) commits on its own; a failing hook is logged and rolled back
  and never undoes the primary write.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from servicehub.exceptions import ConflictError, ForbiddenError
from servicehub.models.enums import (
    AuditAction,
    AuditEntityType,
    ExpenseAction,
    ExpenseStatus,
    LeaveAction,
    LeaveStatus,
    NotificationType,
    TicketStatus,
    UserRole,
)
from servicehub.services.audit import write_audit_log
from servicehub.services.notification import create_notification

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

OVERRIDE_ROLES: frozenset[UserRole] = frozenset({UserRole.SUPER_ADMIN})

LEAVE_APPROVER_ROLES: frozenset[UserRole] = frozenset({UserRole.MANAGER, UserRole.HR_ADMIN})
EXPENSE_APPROVER_ROLES: frozenset[UserRole] = frozenset({UserRole.MANAGER, UserRole.FINANCE_ADMIN})
EXPENSE_PAYER_ROLES: frozenset[UserRole] = frozenset({UserRole.FINANCE_ADMIN})
TICKET_AGENT_ROLES: frozenset[UserRole] = frozenset({UserRole.IT_ADMIN})

LEAVE_TERMINAL_STATUSES: frozenset[LeaveStatus] = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})
EXPENSE_TERMINAL_STATUSES: frozenset[ExpenseStatus] = frozenset(
    {ExpenseStatus.APPROVED, ExpenseStatus.REJECTED, ExpenseStatus.PAID}
)

# Allowed ticket moves. Escalation is reachable from every non-terminal state.
TICKET_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.OPEN: frozenset({TicketStatus.ASSIGNED, TicketStatus.IN_PROGRESS, TicketStatus.ESCALATED}),
    TicketStatus.ASSIGNED: frozenset({TicketStatus.IN_PROGRESS, TicketStatus.ESCALATED}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.RESOLVED, TicketStatus.ESCALATED}),
    TicketStatus.ESCALATED: frozenset({TicketStatus.ASSIGNED, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.CLOSED, TicketStatus.IN_PROGRESS, TicketStatus.ESCALATED}),
    TicketStatus.CLOSED: frozenset(),
}


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


def has_role(role: UserRole, allowed: Iterable[UserRole]) -> bool:
    """Whether ``role`` is allowed, counting override roles as always allowed."""
    return role in OVERRIDE_ROLES or role in set(allowed)


def authorize(auth: AuthContext, allowed: Iterable[UserRole], operation: str) -> None:
    """Raise ForbiddenError unless the actor's role may perform ``operation``."""
    if not has_role(auth.role, allowed):
        raise ForbiddenError(f"Role {auth.role} is not allowed to {operation}")


# ---------------------------------------------------------------------------
# Transition functions
# ---------------------------------------------------------------------------


def next_leave_status(current: LeaveStatus, role: UserRole, action: LeaveAction) -> LeaveStatus:
    """Compute the status a leave request moves to when ``role`` takes ``action``.

    A manager approval forwards the request to HR; an HR (or override)
    approval is final. Reject and escalate ignore the role.
    """
    current = LeaveStatus(current)
    if current in LEAVE_TERMINAL_STATUSES:
        raise ConflictError(f"Leave request is already {current}")
    if current == LeaveStatus.DRAFT:
        raise ConflictError("Leave request has not been submitted")

    if action == LeaveAction.REJECT:
        return LeaveStatus.REJECTED
    if action == LeaveAction.ESCALATE:
        if current == LeaveStatus.ESCALATED:
            raise ConflictError("Leave request is already escalated")
        return LeaveStatus.ESCALATED
    if action == LeaveAction.APPROVE:
        if role == UserRole.MANAGER:
            if current in (LeaveStatus.SUBMITTED, LeaveStatus.PENDING_MANAGER):
                return LeaveStatus.PENDING_HR
            raise ConflictError(f"Leave request is {current}; only HR can approve it now")
        if has_role(role, {UserRole.HR_ADMIN}):
            return LeaveStatus.APPROVED
        raise ForbiddenError(f"Role {role} cannot approve leave requests")
    raise ConflictError(f"Unsupported leave action: {action}")


def next_expense_status(current: ExpenseStatus, role: UserRole, action: ExpenseAction) -> ExpenseStatus:
    """Compute the status an expense claim moves to when ``role`` takes ``action``.

    Same shape as leave approval with finance in place of HR.
    """
    current = ExpenseStatus(current)
    if current in EXPENSE_TERMINAL_STATUSES:
        raise ConflictError(f"Expense is already {current}")
    if current == ExpenseStatus.DRAFT:
        raise ConflictError("Expense has not been submitted")

    if action == ExpenseAction.REJECT:
        return ExpenseStatus.REJECTED
    if action == ExpenseAction.APPROVE:
        if role == UserRole.MANAGER:
            if current in (ExpenseStatus.SUBMITTED, ExpenseStatus.PENDING_MANAGER):
                return ExpenseStatus.PENDING_FINANCE
            raise ConflictError(f"Expense is {current}; only finance can approve it now")
        if has_role(role, {UserRole.FINANCE_ADMIN}):
            return ExpenseStatus.APPROVED
        raise ForbiddenError(f"Role {role} cannot approve expenses")
    raise ConflictError(f"Unsupported expense action: {action}")


def check_ticket_transition(current: TicketStatus, new: TicketStatus, reassigning: bool = False) -> None:
    """Raise ConflictError unless a ticket may move from ``current`` to ``new``.

    Posting the current status again is accepted only as a pure reassignment.
    """
    current = TicketStatus(current)
    new = TicketStatus(new)
    if current == new:
        if current == TicketStatus.CLOSED:
            raise ConflictError("Ticket is closed")
        if not reassigning:
            raise ConflictError(f"Ticket is already {current}")
        return
    if new not in TICKET_TRANSITIONS[current]:
        raise ConflictError(f"Ticket cannot move from {current} to {new}")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


async def next_history_sequence(session: AsyncSession, parent_column: Any, parent_id: uuid.UUID) -> int:
    """Return the 1-based position of the next history entry for a parent entity."""
    result = await session.execute(select(func.count()).where(parent_column == parent_id))
    return int(result.scalar_one()) + 1


# ---------------------------------------------------------------------------
# Post-commit side effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NotificationDraft:
    """A notification to send once the transition has been committed."""

    user_id: uuid.UUID
    title: str
    body: str
    notification_type: NotificationType = NotificationType.STATUS_UPDATE


@dataclass(frozen=True)
class WorkflowEvent:
    """Everything the side-effect hooks need about a committed change."""

    company_id: uuid.UUID
    actor_id: uuid.UUID
    entity_type: AuditEntityType
    entity_id: uuid.UUID
    action: AuditAction
    details: str
    notifications: tuple[NotificationDraft, ...] = ()
    before_json: dict[str, Any] | None = None
    after_json: dict[str, Any] | None = None


PostCommitHook = Callable[["AsyncSession", WorkflowEvent], Awaitable[None]]


def notification_recipients(*user_ids: uuid.UUID | None, exclude: uuid.UUID | None = None) -> list[uuid.UUID]:
    """Distinct, non-null user ids in order, without ``exclude``."""
    recipients: list[uuid.UUID] = []
    for user_id in user_ids:
        if user_id is None or user_id == exclude or user_id in recipients:
            continue
        recipients.append(user_id)
    return recipients


async def deliver_notifications(session: AsyncSession, event: WorkflowEvent) -> None:
    """Persist the event's notifications."""
    if not event.notifications:
        return
    for draft in event.notifications:
        create_notification(
            session,
            company_id=event.company_id,
            user_id=draft.user_id,
            title=draft.title,
            body=draft.body,
            notification_type=draft.notification_type,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
        )
    await session.commit()


async def record_audit(session: AsyncSession, event: WorkflowEvent) -> None:
    """Append the audit log entry for the event."""
    await write_audit_log(
        session,
        company_id=event.company_id,
        actor_id=event.actor_id,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        action=event.action,
        details=event.details,
        before_json=event.before_json,
        after_json=event.after_json,
    )
    await session.commit()


DEFAULT_POST_COMMIT_HOOKS: tuple[PostCommitHook, ...] = (deliver_notifications, record_audit)

_post_commit_hooks: tuple[PostCommitHook, ...] = DEFAULT_POST_COMMIT_HOOKS


def get_post_commit_hooks() -> tuple[PostCommitHook, ...]:
    """Return the hooks run after every committed transition, in order."""
    return _post_commit_hooks


def set_post_commit_hooks(hooks: Iterable[PostCommitHook]) -> None:
    """Override the hook list (for testing or production wiring)."""
    global _post_commit_hooks
    _post_commit_hooks = tuple(hooks)


async def run_post_commit_hooks(session: AsyncSession, event: WorkflowEvent) -> None:
    """Run every hook in order, isolating failures from the committed change."""
    for hook in get_post_commit_hooks():
        try:
            await hook(session, event)
        except Exception:
            logger.exception(
                "Post-commit hook %s failed for %s %s",
                getattr(hook, "__name__", repr(hook)),
                event.entity_type,
                event.entity_id,
            )
            try:
                await session.rollback()
            except Exception:
                logger.exception("Rollback after hook %s failed", getattr(hook, "__name__", repr(hook)))
