# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from servicehub.models.base import TimestampMixin, UTCDateTime, UUIDBase
from servicehub.models.enums import ExpenseStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Expense(UUIDBase, TimestampMixin, table=True):
    """A reimbursement claim moving through manager and finance approval."""

    __tablename__ = "expense"
    __table_args__ = (sa.Index("ix_expense_company_status", "company_id", "status"),)

    company_id: uuid.UUID = Field(index=True)
    submitted_by: uuid.UUID = Field(index=True)
    submitted_by_name: str = Field(max_length=255)
    manager_id: uuid.UUID | None = Field(default=None, index=True)
    title: str = Field(max_length=255)
    description: str = ""
    amount: Decimal = Field(sa_type=sa.Numeric(12, 2))  # ty: ignore[invalid-argument-type]
    currency: str = Field(default="USD", max_length=3)
    category: str = Field(max_length=100)
    receipt_uri: str | None = None
    status: str = Field(
        default=ExpenseStatus.SUBMITTED, max_length=50, sa_column_kwargs={"server_default": "Submitted"}
    )


class ExpenseApproval(UUIDBase, table=True):
    """Append-only approval chain entry for an expense claim."""

    __tablename__ = "expense_approval"
    __table_args__ = (sa.UniqueConstraint("expense_id", "sequence", name="uq_expense_approval_sequence"),)

    expense_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("expense.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    sequence: int
    approver_id: uuid.UUID
    approver_name: str = Field(max_length=255)
    action: str = Field(max_length=50)
    comment: str = ""
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=UTCDateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
