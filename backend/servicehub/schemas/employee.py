# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from servicehub.models.enums import UserRole


class UpsertEmployeeRequest(BaseModel):
    """Request body for upserting an employee in the directory stub."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.EMPLOYEE
    department: str = Field(default="General", min_length=1, max_length=100)
    title: str = Field(default="", max_length=255)
    manager_id: uuid.UUID | None = None


class EmployeeResponse(BaseModel):
    """Response schema for a directory entry."""

    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    email: str
    role: UserRole
    department: str
    title: str
    manager_id: uuid.UUID | None


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
