from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_, select
from sqlmodel import col

from servicehub.exceptions import ValidationError
from servicehub.models.leave import Leave
from servicehub.models.ticket import Ticket
from servicehub.schemas.employee import EmployeeResponse
from servicehub.schemas.search import LeaveSearchHit, SearchResponse, TicketSearchHit
from servicehub.services.employee import filter_employees, get_employee_service
from servicehub.services.leave import leave_visibility_filters
from servicehub.services.ticket import ticket_visibility_filters

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_RESULT_LIMIT = 10

_LIKE_ESCAPE = "\\"


def _contains_pattern(term: str) -> str:
    """Build an ILIKE pattern matching ``term`` literally anywhere in a column."""
    escaped = term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")
    return f"%{escaped}%"


async def search_all(session: AsyncSession, auth: AuthContext, query: str) -> SearchResponse:
    """Search the directory, tickets and leave requests of the caller's company.

    People match on name, email or department, tickets on title or
    description, leave requests on reason or type. Ticket and leave hits
    honour the same visibility rules as their list endpoints.
    """
    term = query.strip()
    if len(term) < SEARCH_MIN_LENGTH:
        raise ValidationError(f"Search query must be at least {SEARCH_MIN_LENGTH} characters")

    directory = await get_employee_service().list_employees(auth.company_id)
    employees = filter_employees(directory, search=term)[:SEARCH_RESULT_LIMIT]

    pattern = _contains_pattern(term)
    ticket_result = await session.execute(
        select(Ticket)
        .where(
            col(Ticket.company_id) == auth.company_id,
            *ticket_visibility_filters(auth),
            or_(
                col(Ticket.title).ilike(pattern, escape=_LIKE_ESCAPE),
                col(Ticket.description).ilike(pattern, escape=_LIKE_ESCAPE),
            ),
        )
        .order_by(col(Ticket.created_at).desc())
        .limit(SEARCH_RESULT_LIMIT)
    )
    leave_result = await session.execute(
        select(Leave)
        .where(
            col(Leave.company_id) == auth.company_id,
            *leave_visibility_filters(auth),
            or_(
                col(Leave.reason).ilike(pattern, escape=_LIKE_ESCAPE),
                col(Leave.leave_type).ilike(pattern, escape=_LIKE_ESCAPE),
            ),
        )
        .order_by(col(Leave.created_at).desc())
        .limit(SEARCH_RESULT_LIMIT)
    )
    tickets = list(ticket_result.scalars().all())
    leaves = list(leave_result.scalars().all())
    logger.debug(
        "Search %r by %s: %d people, %d tickets, %d leaves",
        term,
        auth.user_id,
        len(employees),
        len(tickets),
        len(leaves),
    )

    return SearchResponse(
        employees=[EmployeeResponse(**e.model_dump()) for e in employees],
        tickets=[
            TicketSearchHit(
                id=t.id,
                title=t.title,
                status=t.status,
                priority=t.priority,
                created_by_name=t.created_by_name,
                created_at=t.created_at,
            )
            for t in tickets
        ],
        leaves=[
            LeaveSearchHit(
                id=lv.id,
                employee_id=lv.employee_id,
                employee_name=lv.employee_name,
                leave_type=lv.leave_type,
                start_date=lv.start_date,
                end_date=lv.end_date,
                status=lv.status,
            )
            for lv in leaves
        ],
    )
