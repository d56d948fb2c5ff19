# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from servicehub.models.enums import LeaveAction, LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a leave request."""

    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(default="", max_length=2000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class LeaveTransitionPayload(BaseModel):
    """Request body for approve / reject / escalate on a leave request."""

    action: LeaveAction
    comment: str = Field(default="", max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ApprovalEntryResponse(BaseModel):
    """One entry of an approval chain."""

    id: uuid.UUID
    sequence: int
    approver_id: uuid.UUID
    approver_name: str
    action: str
    comment: str
    created_at: datetime


class LeaveResponse(BaseModel):
    """Response schema for a leave request with its approval history."""

    id: uuid.UUID
    company_id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    manager_id: uuid.UUID | None
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    approval_history: list[ApprovalEntryResponse]
    created_at: datetime
    updated_at: datetime


class LeaveListResponse(BaseModel):
    """List of leave requests visible to the caller."""

    items: list[LeaveResponse]
    total: int


class LeaveBalanceResponse(BaseModel):
    """Remaining leave days for an employee."""

    employee_id: uuid.UUID
    annual: int
    sick: int
    personal: int
