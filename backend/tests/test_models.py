from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import sqlalchemy as sa

from servicehub.models import (
    AuditLog,
    Expense,
    Leave,
    LeaveApproval,
    LeaveBalance,
    Notification,
    SQLModel,
    Ticket,
    TicketComment,
    UTCDateTime,
)
from servicehub.models.enums import ExpenseStatus, LeaveStatus, NotificationType, TicketStatus

EXPECTED_TABLES = {
    "audit_log",
    "expense",
    "expense_approval",
    "leave_approval",
    "leave_balance",
    "leave_request",
    "notification",
    "ticket",
    "ticket_comment",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_history_tables_have_unique_sequence() -> None:
    for table_name, parent in [
        ("leave_approval", "leave_id"),
        ("expense_approval", "expense_id"),
        ("ticket_comment", "ticket_id"),
    ]:
        table = SQLModel.metadata.tables[table_name]
        unique_sets = [
            {c.name for c in constraint.columns}
            for constraint in table.constraints
            if isinstance(constraint, sa.UniqueConstraint)
        ]
        assert {parent, "sequence"} in unique_sets


def test_leave_instantiation() -> None:
    leave = Leave(
        company_id=uuid.uuid4(),
        employee_id=uuid.uuid4(),
        employee_name="Uma One",
        leave_type="Annual",
        start_date=date(2026, 3, 10),
        end_date=date(2026, 3, 14),
    )
    assert leave.id is not None
    assert leave.status == LeaveStatus.SUBMITTED
    assert leave.manager_id is None
    assert leave.created_at.tzinfo is not None


def test_leave_approval_instantiation() -> None:
    entry = LeaveApproval(
        leave_id=uuid.uuid4(),
        sequence=1,
        approver_id=uuid.uuid4(),
        approver_name="Uma One",
        action="submit",
    )
    assert entry.comment == ""
    assert entry.created_at.tzinfo is not None


def test_expense_keeps_decimal_amount() -> None:
    expense = Expense(
        company_id=uuid.uuid4(),
        submitted_by=uuid.uuid4(),
        submitted_by_name="Uma One",
        title="Travel",
        amount=Decimal("1850.00"),
        category="Travel",
    )
    assert expense.amount == Decimal("1850.00")
    assert expense.currency == "USD"
    assert expense.status == ExpenseStatus.SUBMITTED


def test_ticket_defaults() -> None:
    now = datetime.now(UTC)
    ticket = Ticket(
        company_id=uuid.uuid4(),
        created_by=uuid.uuid4(),
        created_by_name="Cora",
        title="Printer",
        description="Jammed",
        category="Hardware",
        sla_deadline=now + timedelta(hours=48),
    )
    assert ticket.status == TicketStatus.OPEN
    assert ticket.priority == "Medium"
    assert ticket.assignee_id is None


def test_ticket_comment_defaults_to_user_comment() -> None:
    comment = TicketComment(
        ticket_id=uuid.uuid4(),
        sequence=1,
        author_id=uuid.uuid4(),
        author_name="Cora",
        content="Any update?",
    )
    assert comment.is_system is False


def test_notification_defaults() -> None:
    notification = Notification(company_id=uuid.uuid4(), user_id=uuid.uuid4(), title="t", body="b")
    assert notification.is_read is False
    assert notification.type == NotificationType.STATUS_UPDATE


def test_audit_log_json_fields() -> None:
    entry = AuditLog(
        company_id=uuid.uuid4(),
        actor_id=uuid.uuid4(),
        entity_type="leave",
        entity_id=uuid.uuid4(),
        action="approve",
        before_json={"status": "Pending_Manager"},
        after_json={"status": "Pending_HR"},
    )
    assert entry.before_json == {"status": "Pending_Manager"}
    assert entry.after_json == {"status": "Pending_HR"}


def test_leave_balance_defaults() -> None:
    balance = LeaveBalance(company_id=uuid.uuid4(), employee_id=uuid.uuid4())
    assert (balance.annual, balance.sick, balance.personal) == (15, 8, 3)


# ---------------------------------------------------------------------------
# UTCDateTime
# ---------------------------------------------------------------------------


def test_utc_datetime_tags_naive_values() -> None:
    column_type = UTCDateTime()
    naive = datetime(2026, 3, 10, 9, 0)
    loaded = column_type.process_result_value(naive, None)
    assert loaded == datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


def test_utc_datetime_converts_offsets_to_utc() -> None:
    column_type = UTCDateTime()
    plus_two = datetime(2026, 3, 10, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    bound = column_type.process_bind_param(plus_two, None)
    assert bound is not None
    assert bound.utcoffset() == timedelta(0)
    assert bound.hour == 9


def test_utc_datetime_passes_none() -> None:
    column_type = UTCDateTime()
    assert column_type.process_bind_param(None, None) is None
    assert column_type.process_result_value(None, None) is None
