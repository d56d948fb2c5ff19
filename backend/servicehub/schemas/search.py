# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel

from servicehub.models.enums import LeaveStatus, LeaveType, TicketPriority, TicketStatus
from servicehub.schemas.employee import EmployeeResponse


class TicketSearchHit(BaseModel):
    """A ticket matched by title or description."""

    id: uuid.UUID
    title: str
    status: TicketStatus
    priority: TicketPriority
    created_by_name: str
    created_at: datetime


class LeaveSearchHit(BaseModel):
    """A leave request matched by reason or type."""

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus


class SearchResponse(BaseModel):
    """Company-wide search results, capped per kind."""

    employees: list[EmployeeResponse]
    tickets: list[TicketSearchHit]
    leaves: list[LeaveSearchHit]
