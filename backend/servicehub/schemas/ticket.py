# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from servicehub.models.enums import TicketCategory, TicketPriority, TicketStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateTicketPayload(BaseModel):
    """Request body for opening a support ticket."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)
    category: TicketCategory
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketStatusPayload(BaseModel):
    """Request body for a ticket status change, optionally reassigning it."""

    status: TicketStatus
    assignee_id: uuid.UUID | None = None


class AddCommentPayload(BaseModel):
    """Request body for commenting on a ticket."""

    content: str = Field(min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "content must not be blank"
            raise ValueError(msg)
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CommentResponse(BaseModel):
    """A ticket comment or system status note."""

    id: uuid.UUID
    ticket_id: uuid.UUID
    sequence: int
    author_id: uuid.UUID
    author_name: str
    content: str
    is_system: bool
    created_at: datetime


class TicketResponse(BaseModel):
    """Response schema for a ticket; SLA fields are derived at read time."""

    id: uuid.UUID
    company_id: uuid.UUID
    created_by: uuid.UUID
    created_by_name: str
    assignee_id: uuid.UUID | None
    title: str
    description: str
    category: TicketCategory
    priority: TicketPriority
    status: TicketStatus
    sla_deadline: datetime
    sla_remaining_seconds: int
    sla_breached: bool
    comments: list[CommentResponse]
    created_at: datetime
    updated_at: datetime


class TicketListResponse(BaseModel):
    """List of tickets visible to the caller."""

    items: list[TicketResponse]
    total: int
