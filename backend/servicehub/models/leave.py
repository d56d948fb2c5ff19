# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from servicehub.models.base import TimestampMixin, UTCDateTime, UUIDBase
from servicehub.models.enums import LeaveStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Leave(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (sa.Index("ix_leave_company_status", "company_id", "status"),)

    company_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID = Field(index=True)
    employee_name: str = Field(max_length=255)
    # Copied from the directory at submission; later reassignment does not reroute.
    manager_id: uuid.UUID | None = Field(default=None, index=True)
    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    reason: str = ""
    status: str = Field(
        default=LeaveStatus.SUBMITTED, max_length=50, sa_column_kwargs={"server_default": "Submitted"}
    )


class LeaveApproval(UUIDBase, table=True):
    """Append-only approval chain entry for a leave request."""

    __tablename__ = "leave_approval"
    __table_args__ = (sa.UniqueConstraint("leave_id", "sequence", name="uq_leave_approval_sequence"),)

    leave_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
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
