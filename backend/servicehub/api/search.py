# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from servicehub.api.deps import AuthDep, validate_company_scope
from servicehub.db import SessionDep
from servicehub.schemas.search import SearchResponse
from servicehub.services import search as search_service

search_router = APIRouter(
    prefix="/companies/{company_id}/search",
    tags=["search"],
    dependencies=[Depends(validate_company_scope)],
)


@search_router.get("", response_model=SearchResponse)
async def search(
    session: SessionDep,
    auth: AuthDep,
    q: str = Query(default="", max_length=255),
) -> SearchResponse:
    """Search people, tickets and leave requests in the company."""
    return await search_service.search_all(session, auth, q)
