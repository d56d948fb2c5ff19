# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from servicehub.api.deps import AuthDep, validate_company_scope
from servicehub.db import SessionDep
from servicehub.models.enums import ExpenseStatus
from servicehub.schemas.expense import (
    ExpenseListResponse,
    ExpenseResponse,
    ExpenseTransitionPayload,
    MarkPaidPayload,
    SubmitExpensePayload,
)
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services import expense as expense_service

expenses_router = APIRouter(
    prefix="/companies/{company_id}/expenses",
    tags=["expenses"],
    dependencies=[Depends(validate_company_scope)],
)


@expenses_router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def submit_expense(
    payload: SubmitExpensePayload,
    session: SessionDep,
    auth: AuthDep,
) -> ExpenseResponse:
    """Submit an expense claim for the caller."""
    return await expense_service.submit_expense(session, auth, payload)


@expenses_router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    session: SessionDep,
    auth: AuthDep,
    status_filter: ExpenseStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> ExpenseListResponse:
    """List expense claims visible to the caller."""
    return await expense_service.list_expenses(session, auth, status_filter, offset, limit)


@expenses_router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ExpenseResponse:
    """Get a single expense claim with its approval history."""
    return await expense_service.get_expense(session, auth, expense_id)


@expenses_router.post("/{expense_id}/transition", response_model=TransitionResponse)
async def transition_expense(
    expense_id: uuid.UUID,
    payload: ExpenseTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TransitionResponse:
    """Approve or reject an expense claim."""
    return await expense_service.transition_expense(session, auth, expense_id, payload)


@expenses_router.post("/{expense_id}/pay", response_model=TransitionResponse)
async def mark_expense_paid(
    expense_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: MarkPaidPayload | None = None,
) -> TransitionResponse:
    """Record reimbursement of an approved expense (finance only)."""
    return await expense_service.mark_expense_paid(session, auth, expense_id, payload)
