# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from servicehub.models.enums import UserRole


class AuthContext(BaseModel):
    """Acting user for a workflow call, extracted from request headers in dev."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    role: UserRole = UserRole.EMPLOYEE
