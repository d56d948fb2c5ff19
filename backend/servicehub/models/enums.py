from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    """Directory role of a user; drives workflow authorization."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    HR_ADMIN = "HR_ADMIN"
    IT_ADMIN = "IT_ADMIN"
    FINANCE_ADMIN = "FINANCE_ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class LeaveType(enum.StrEnum):
    """Kind of leave being requested."""

    ANNUAL = "Annual"
    SICK = "Sick"
    PERSONAL = "Personal"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    BEREAVEMENT = "Bereavement"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    PENDING_MANAGER = "Pending_Manager"
    PENDING_HR = "Pending_HR"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ESCALATED = "Escalated"


class LeaveAction(enum.StrEnum):
    """Action an approver takes on a leave request."""

    APPROVE = "approve"
    REJECT = "reject"
    ESCALATE = "escalate"


class ExpenseStatus(enum.StrEnum):
    """State machine for expense claims."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    PENDING_MANAGER = "Pending_Manager"
    PENDING_FINANCE = "Pending_Finance"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"


class ExpenseAction(enum.StrEnum):
    """Action an approver takes on an expense claim."""

    APPROVE = "approve"
    REJECT = "reject"


class TicketStatus(enum.StrEnum):
    """State machine for IT support tickets."""

    OPEN = "Open"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In_Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    ESCALATED = "Escalated"


class TicketPriority(enum.StrEnum):
    """Ticket priority; determines the SLA window."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TicketCategory(enum.StrEnum):
    """Area of IT the ticket concerns."""

    HARDWARE = "Hardware"
    SOFTWARE = "Software"
    NETWORK = "Network"
    ACCESS = "Access"
    OTHER = "Other"


class HistoryAction(enum.StrEnum):
    """Action recorded on an approval chain entry."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    ESCALATE = "escalate"
    PAY = "pay"


class NotificationType(enum.StrEnum):
    """Category tag shown with a notification."""

    ACTION_REQUIRED = "action_required"
    STATUS_UPDATE = "status_update"
    ANNOUNCEMENT = "announcement"
    ESCALATION = "escalation"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log and on notification links."""

    LEAVE = "leave"
    EXPENSE = "expense"
    TICKET = "ticket"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "create"
    APPROVE = "approve"
    REJECT = "reject"
    ESCALATE = "escalate"
    PAY = "pay"
    STATUS_CHANGE = "status_change"
    COMMENT = "comment"
