from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from servicehub.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from servicehub.models.enums import AuditAction, AuditEntityType


def _json_safe(value: Any) -> Any:
    if isinstance(value, (uuid.UUID, Decimal)):
        # Decimal goes out as text so amounts keep their exact cents
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def model_to_audit_dict(model: SQLModel, *, exclude: set[str] | None = None) -> dict[str, Any]:
    """Snapshot a workflow entity as a JSON-safe dict for the before/after columns."""
    return {key: _json_safe(value) for key, value in model.model_dump(exclude=exclude).items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    company_id: uuid.UUID,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    details: str | None = None,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit entry on the session. The caller owns the commit."""
    entry = AuditLog(
        company_id=company_id,
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        details=details,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def list_audit_trail(
    session: AsyncSession,
    company_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
) -> list[AuditLog]:
    """Return every audit entry for one entity, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(
            col(AuditLog.company_id) == company_id,
            col(AuditLog.entity_type) == entity_type.value,
            col(AuditLog.entity_id) == entity_id,
        )
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )
    return list(result.scalars().all())
