# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from servicehub.models.base import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(UTC)


class LeaveBalance(SQLModel, table=True):
    """Remaining leave allowance in days, created lazily with company defaults."""

    __tablename__ = "leave_balance"
    __table_args__ = (sa.PrimaryKeyConstraint("company_id", "employee_id"),)

    company_id: uuid.UUID
    employee_id: uuid.UUID = Field(index=True)
    annual: int = Field(default=15, sa_column_kwargs={"server_default": "15"})
    sick: int = Field(default=8, sa_column_kwargs={"server_default": "8"})
    personal: int = Field(default=3, sa_column_kwargs={"server_default": "3"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=UTCDateTime(),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
