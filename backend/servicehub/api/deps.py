# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path

from servicehub.exceptions import ForbiddenError
from servicehub.models.enums import UserRole
from servicehub.schemas.auth import AuthContext


async def get_auth_context(
    x_company_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: UserRole = Header(default=UserRole.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(company_id=x_company_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_super_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require the override role for the request."""
    if auth.role != UserRole.SUPER_ADMIN:
        raise ForbiddenError("Super admin access required")
    return auth


SuperAdminDep = Annotated[AuthContext, Depends(require_super_admin)]


async def validate_company_scope(
    company_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path company_id matches the auth header company_id."""
    if company_id != auth.company_id:
        raise ForbiddenError("Company ID mismatch")
    return auth
