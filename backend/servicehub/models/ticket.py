# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from servicehub.models.base import TimestampMixin, UTCDateTime, UUIDBase
from servicehub.models.enums import TicketPriority, TicketStatus


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Ticket(UUIDBase, TimestampMixin, table=True):
    """An IT support ticket with an SLA deadline fixed at creation."""

    __tablename__ = "ticket"
    __table_args__ = (sa.Index("ix_ticket_company_status", "company_id", "status"),)

    company_id: uuid.UUID = Field(index=True)
    created_by: uuid.UUID = Field(index=True)
    created_by_name: str = Field(max_length=255)
    assignee_id: uuid.UUID | None = Field(default=None, index=True)
    title: str = Field(max_length=255)
    description: str
    category: str = Field(max_length=50)
    priority: str = Field(default=TicketPriority.MEDIUM, max_length=50)
    status: str = Field(default=TicketStatus.OPEN, max_length=50, sa_column_kwargs={"server_default": "Open"})
    sla_deadline: datetime = Field(sa_type=UTCDateTime())  # ty: ignore[invalid-argument-type]


class TicketComment(UUIDBase, table=True):
    """Append-only ticket history: user comments and system status notes."""

    __tablename__ = "ticket_comment"
    __table_args__ = (sa.UniqueConstraint("ticket_id", "sequence", name="uq_ticket_comment_sequence"),)

    ticket_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("ticket.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    sequence: int
    author_id: uuid.UUID
    author_name: str = Field(max_length=255)
    content: str
    is_system: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=UTCDateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
