# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from servicehub.api.deps import AuthDep, SuperAdminDep, validate_company_scope
from servicehub.exceptions import NotFoundError, ValidationError
from servicehub.models.enums import UserRole
from servicehub.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from servicehub.services.employee import EmployeeInfo, filter_employees, get_employee_service

employees_router = APIRouter(
    prefix="/companies/{company_id}/employees",
    tags=["employees"],
    dependencies=[Depends(validate_company_scope)],
)


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        company_id=employee.company_id,
        name=employee.name,
        email=employee.email,
        role=employee.role,
        department=employee.department,
        title=employee.title,
        manager_id=employee.manager_id,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: SuperAdminDep,
) -> EmployeeResponse:
    """Create or update a directory entry in the stub service (super admin only)."""
    if payload.manager_id == employee_id:
        raise ValidationError("An employee cannot be their own manager")
    svc = get_employee_service()
    employee = EmployeeInfo(
        id=employee_id,
        company_id=company_id,
        name=payload.name,
        email=payload.email,
        role=payload.role,
        department=payload.department,
        title=payload.title,
        manager_id=payload.manager_id,
    )
    svc.seed(employee)  # ty: ignore[unresolved-attribute]
    return _build_employee_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get a directory entry from the stub service."""
    employee = await get_employee_service().get_employee(company_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return _build_employee_response(employee)


@employees_router.get(
    "",
    response_model=EmployeeListResponse,
)
async def list_employees(
    company_id: uuid.UUID,
    auth: AuthDep,
    department: str | None = Query(default=None, max_length=100),
    role: UserRole | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
) -> EmployeeListResponse:
    """List the company directory, optionally filtered by department, role or a name search."""
    employees = filter_employees(
        await get_employee_service().list_employees(company_id),
        department=department,
        role=role,
        search=search,
    )
    items = [_build_employee_response(e) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))
