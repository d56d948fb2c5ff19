# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from servicehub.api.deps import AuthDep, validate_company_scope
from servicehub.db import SessionDep
from servicehub.models.enums import LeaveStatus
from servicehub.schemas.leave import (
    LeaveBalanceResponse,
    LeaveListResponse,
    LeaveResponse,
    LeaveTransitionPayload,
    SubmitLeavePayload,
)
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services import leave as leave_service

leaves_router = APIRouter(
    prefix="/companies/{company_id}/leaves",
    tags=["leaves"],
    dependencies=[Depends(validate_company_scope)],
)


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Submit a leave request for the caller."""
    return await leave_service.submit_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveListResponse:
    """List leave requests visible to the caller."""
    return await leave_service.list_leaves(session, auth, status_filter, offset, limit)


@leaves_router.get("/balance", response_model=LeaveBalanceResponse)
async def get_leave_balance(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveBalanceResponse:
    """Get the caller's remaining leave days."""
    return await leave_service.get_leave_balance(session, auth)


@leaves_router.get("/{leave_id}", response_model=LeaveResponse)
async def get_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Get a single leave request with its approval history."""
    return await leave_service.get_leave(session, auth, leave_id)


@leaves_router.post("/{leave_id}/transition", response_model=TransitionResponse)
async def transition_leave(
    leave_id: uuid.UUID,
    payload: LeaveTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TransitionResponse:
    """Approve, reject or escalate a leave request."""
    return await leave_service.transition_leave(session, auth, leave_id, payload)
