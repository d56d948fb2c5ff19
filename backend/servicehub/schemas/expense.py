# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from servicehub.models.enums import ExpenseAction, ExpenseStatus
from servicehub.schemas.leave import ApprovalEntryResponse

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitExpensePayload(BaseModel):
    """Request body for submitting an expense claim."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    category: str = Field(min_length=1, max_length=100)
    receipt_uri: str | None = Field(default=None, max_length=2048)


class ExpenseTransitionPayload(BaseModel):
    """Request body for approve / reject on an expense claim."""

    action: ExpenseAction
    comment: str = Field(default="", max_length=1000)


class MarkPaidPayload(BaseModel):
    """Request body for recording reimbursement of an approved claim."""

    comment: str = Field(default="", max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ExpenseResponse(BaseModel):
    """Response schema for an expense claim with its approval history."""

    id: uuid.UUID
    company_id: uuid.UUID
    submitted_by: uuid.UUID
    submitted_by_name: str
    manager_id: uuid.UUID | None
    title: str
    description: str
    amount: Decimal
    currency: str
    category: str
    receipt_uri: str | None
    status: ExpenseStatus
    approval_history: list[ApprovalEntryResponse]
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(BaseModel):
    """List of expense claims visible to the caller."""

    items: list[ExpenseResponse]
    total: int
