from sqlmodel import SQLModel

from servicehub.models.audit import AuditLog
from servicehub.models.balance import LeaveBalance
from servicehub.models.base import TimestampMixin, UTCDateTime, UUIDBase
from servicehub.models.enums import (
    AuditAction,
    AuditEntityType,
    ExpenseAction,
    ExpenseStatus,
    HistoryAction,
    LeaveAction,
    LeaveStatus,
    LeaveType,
    NotificationType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    UserRole,
)
from servicehub.models.expense import Expense, ExpenseApproval
from servicehub.models.leave import Leave, LeaveApproval
from servicehub.models.notification import Notification
from servicehub.models.ticket import Ticket, TicketComment

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Expense",
    "ExpenseAction",
    "ExpenseApproval",
    "ExpenseStatus",
    "HistoryAction",
    "Leave",
    "LeaveAction",
    "LeaveApproval",
    "LeaveBalance",
    "LeaveStatus",
    "LeaveType",
    "Notification",
    "NotificationType",
    "SQLModel",
    "Ticket",
    "TicketCategory",
    "TicketComment",
    "TicketPriority",
    "TicketStatus",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDBase",
    "UserRole",
]
