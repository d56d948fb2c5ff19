# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from servicehub.models.enums import UserRole

UNKNOWN_NAME = "Unknown"


class EmployeeInfo(BaseModel):
    """Directory entry for a user of the company."""

    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    email: str
    role: UserRole = UserRole.EMPLOYEE
    department: str = "General"
    title: str = ""
    manager_id: uuid.UUID | None = None


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the employee directory."""

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch a directory entry. Returns None if not found."""
        ...

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[tuple[uuid.UUID, uuid.UUID], EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[(employee.company_id, employee.id)] = employee

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch a directory entry. Returns None if not found."""
        return self._employees.get((company_id, employee_id))

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        return [e for e in self._employees.values() if e.company_id == company_id]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the employee directory."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service


async def resolve_display_name(company_id: uuid.UUID, user_id: uuid.UUID) -> str:
    """Return the directory name for a user, or a placeholder when unknown."""
    employee = await get_employee_service().get_employee(company_id, user_id)
    return employee.name if employee is not None else UNKNOWN_NAME


async def list_ids_with_role(company_id: uuid.UUID, role: UserRole) -> list[uuid.UUID]:
    """Return the ids of every employee in the company holding the given role."""
    employees = await get_employee_service().list_employees(company_id)
    return [e.id for e in employees if e.role == role]


def filter_employees(
    employees: list[EmployeeInfo],
    *,
    department: str | None = None,
    role: UserRole | None = None,
    search: str | None = None,
) -> list[EmployeeInfo]:
    """Narrow directory entries, sorted by name.

    ``department`` and ``role`` match exactly; ``search`` is a
    case-insensitive substring of name, email or department.
    """
    needle = search.strip().lower() if search else ""
    matches = [
        e
        for e in employees
        if (department is None or e.department == department)
        and (role is None or e.role == role)
        and (not needle or needle in e.name.lower() or needle in e.email.lower() or needle in e.department.lower())
    ]
    return sorted(matches, key=lambda e: e.name.lower())
