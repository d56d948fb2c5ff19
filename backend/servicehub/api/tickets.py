# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from servicehub.api.deps import AuthDep, validate_company_scope
from servicehub.db import SessionDep
from servicehub.models.enums import TicketStatus
from servicehub.schemas.ticket import (
    AddCommentPayload,
    CommentResponse,
    CreateTicketPayload,
    TicketListResponse,
    TicketResponse,
    TicketStatusPayload,
)
from servicehub.schemas.workflow import TransitionResponse
from servicehub.services import ticket as ticket_service

tickets_router = APIRouter(
    prefix="/companies/{company_id}/tickets",
    tags=["tickets"],
    dependencies=[Depends(validate_company_scope)],
)


@tickets_router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: CreateTicketPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TicketResponse:
    """Open a support ticket."""
    return await ticket_service.create_ticket(session, auth, payload)


@tickets_router.get("", response_model=TicketListResponse)
async def list_tickets(
    session: SessionDep,
    auth: AuthDep,
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> TicketListResponse:
    """List tickets visible to the caller."""
    return await ticket_service.list_tickets(session, auth, status_filter, offset, limit)


@tickets_router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TicketResponse:
    """Get a ticket with its comments and SLA status."""
    return await ticket_service.get_ticket(session, auth, ticket_id)


@tickets_router.post("/{ticket_id}/status", response_model=TransitionResponse)
async def transition_ticket(
    ticket_id: uuid.UUID,
    payload: TicketStatusPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TransitionResponse:
    """Change a ticket's status, optionally reassigning it (IT only)."""
    return await ticket_service.transition_ticket(session, auth, ticket_id, payload)


@tickets_router.post("/{ticket_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def comment_on_ticket(
    ticket_id: uuid.UUID,
    payload: AddCommentPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CommentResponse:
    """Add a comment to a ticket."""
    return await ticket_service.comment_on_ticket(session, auth, ticket_id, payload)
