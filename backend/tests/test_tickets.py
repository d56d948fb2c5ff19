"""Tests for IT tickets: SLA deadlines, IT-only status changes, the enforced
status order, assignment and comment notifications.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from servicehub.models.enums import UserRole
from servicehub.models.ticket import Ticket
from servicehub.services.employee import EmployeeInfo
from servicehub.services.ticket import _build_ticket_response

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from servicehub.services.employee import InMemoryEmployeeService

COMPANY_ID = uuid.uuid4()
CREATOR_ID = uuid.uuid4()
IT1_ID = uuid.uuid4()
IT2_ID = uuid.uuid4()
BYSTANDER_ID = uuid.uuid4()

TICKETS_URL = f"/companies/{COMPANY_ID}/tickets"
NOTIFICATIONS_URL = f"/companies/{COMPANY_ID}/notifications"


def _headers(user_id: uuid.UUID, role: UserRole = UserRole.EMPLOYEE) -> dict[str, str]:
    return {
        "X-Company-Id": str(COMPANY_ID),
        "X-User-Id": str(user_id),
        "X-Role": role.value,
    }


CREATOR = _headers(CREATOR_ID)
IT1 = _headers(IT1_ID, UserRole.IT_ADMIN)
IT2 = _headers(IT2_ID, UserRole.IT_ADMIN)
BYSTANDER = _headers(BYSTANDER_ID)
BYSTANDER_AS_MANAGER = _headers(BYSTANDER_ID, UserRole.MANAGER)


@pytest.fixture(autouse=True)
def _seed_directory(directory: InMemoryEmployeeService) -> None:
    for user_id, name, role in [
        (CREATOR_ID, "Cora Creator", UserRole.EMPLOYEE),
        (IT1_ID, "Ian Tech", UserRole.IT_ADMIN),
        (IT2_ID, "Ivy Tech", UserRole.IT_ADMIN),
        (BYSTANDER_ID, "Ben Bystander", UserRole.EMPLOYEE),
    ]:
        directory.seed(
            EmployeeInfo(
                id=user_id,
                company_id=COMPANY_ID,
                name=name,
                email=f"{name.split()[0].lower()}@example.com",
                role=role,
            )
        )


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create(client: AsyncClient, priority: str = "High", headers: dict[str, str] = CREATOR) -> dict[str, Any]:
    resp = await client.post(
        TICKETS_URL,
        json={
            "title": "Laptop will not boot",
            "description": "Black screen after the update.",
            "category": "Hardware",
            "priority": priority,
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _move(
    client: AsyncClient,
    ticket_id: str,
    status: str,
    headers: dict[str, str] = IT1,
    assignee_id: uuid.UUID | None = None,
) -> Any:
    body: dict[str, Any] = {"status": status}
    if assignee_id is not None:
        body["assignee_id"] = str(assignee_id)
    return await client.post(f"{TICKETS_URL}/{ticket_id}/status", json=body, headers=headers)


async def _get(client: AsyncClient, ticket_id: str) -> dict[str, Any]:
    resp = await client.get(f"{TICKETS_URL}/{ticket_id}", headers=IT1)
    assert resp.status_code == 200, resp.text
    return resp.json()


async def _titles(client: AsyncClient, headers: dict[str, str]) -> list[str]:
    resp = await client.get(NOTIFICATIONS_URL, headers=headers)
    return [n["title"] for n in resp.json()["items"]]


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


# ---------------------------------------------------------------------------
# Creation and SLA
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("priority", "hours"),
    [("Critical", 4), ("High", 24), ("Medium", 48), ("Low", 72)],
)
async def test_sla_deadline_fixed_from_priority(async_client: AsyncClient, priority: str, hours: int) -> None:
    ticket = await _create(async_client, priority=priority)
    assert ticket["status"] == "Open"
    assert ticket["priority"] == priority
    assert _ts(ticket["sla_deadline"]) - _ts(ticket["created_at"]) == timedelta(hours=hours)
    assert ticket["sla_breached"] is False
    assert 0 < ticket["sla_remaining_seconds"] <= hours * 3600


async def test_default_priority_is_medium(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        TICKETS_URL,
        json={"title": "Printer", "description": "Out of toner", "category": "Hardware"},
        headers=CREATOR,
    )
    assert resp.json()["priority"] == "Medium"


async def test_sla_deadline_unchanged_by_reads(async_client: AsyncClient) -> None:
    ticket = await _create(async_client, priority="Critical")
    first = await _get(async_client, ticket["id"])
    second = await _get(async_client, ticket["id"])
    assert first["sla_deadline"] == second["sla_deadline"] == ticket["sla_deadline"]
    assert second["sla_remaining_seconds"] <= first["sla_remaining_seconds"]


async def test_critical_ticket_breached_after_five_hours(
    async_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    created = await _create(async_client, priority="Critical")
    ticket = (
        await db_session.execute(select(Ticket).where(col(Ticket.id) == uuid.UUID(created["id"])))
    ).scalar_one()

    later = ticket.created_at + timedelta(hours=5)
    view = _build_ticket_response(ticket, [], now=later)
    assert view.sla_deadline == ticket.created_at + timedelta(hours=4)
    assert view.sla_remaining_seconds == -3600
    assert view.sla_breached is True

    earlier = _build_ticket_response(ticket, [], now=ticket.created_at + timedelta(hours=1))
    assert earlier.sla_remaining_seconds == 3 * 3600
    assert earlier.sla_breached is False


async def test_stored_deadline_is_timezone_aware(async_client: AsyncClient, db_session: AsyncSession) -> None:
    created = await _create(async_client)
    db_session.expunge_all()
    ticket = (
        await db_session.execute(select(Ticket).where(col(Ticket.id) == uuid.UUID(created["id"])))
    ).scalar_one()
    assert ticket.sla_deadline.tzinfo is not None
    assert ticket.sla_deadline.utcoffset() == timedelta(0)
    assert ticket.sla_deadline > datetime.now(UTC)


async def test_create_notifies_it_admins(async_client: AsyncClient) -> None:
    await _create(async_client)
    assert await _titles(async_client, IT1) == ["New Support Ticket"]
    assert await _titles(async_client, IT2) == ["New Support Ticket"]
    assert await _titles(async_client, CREATOR) == []


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("headers", [CREATOR, BYSTANDER_AS_MANAGER])
async def test_non_it_cannot_change_status(async_client: AsyncClient, headers: dict[str, str]) -> None:
    ticket = await _create(async_client)
    resp = await _move(async_client, ticket["id"], "In_Progress", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "ForbiddenError"

    unchanged = await _get(async_client, ticket["id"])
    assert unchanged["status"] == "Open"
    assert unchanged["comments"] == []


async def test_full_lifecycle(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    steps = [("Assigned", IT1_ID), ("In_Progress", None), ("Resolved", None), ("Closed", None)]
    for status, assignee in steps:
        resp = await _move(async_client, ticket["id"], status, assignee_id=assignee)
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == status

    final = await _get(async_client, ticket["id"])
    assert final["status"] == "Closed"
    assert final["assignee_id"] == str(IT1_ID)
    assert [c["sequence"] for c in final["comments"]] == [1, 2, 3, 4]
    assert all(c["is_system"] for c in final["comments"])
    assert final["comments"][0]["content"] == "Status changed from Open to Assigned; assigned to Ian Tech"


async def test_closed_ticket_is_terminal(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    for status in ("In_Progress", "Resolved", "Closed"):
        await _move(async_client, ticket["id"], status)
    resp = await _move(async_client, ticket["id"], "In_Progress")
    assert resp.status_code == 409
    assert resp.json()["error"] == "ConflictError"


async def test_resolved_ticket_can_be_escalated(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    for status in ("In_Progress", "Resolved"):
        await _move(async_client, ticket["id"], status)

    resp = await _move(async_client, ticket["id"], "Escalated")
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "Escalated"
    assert (await _get(async_client, ticket["id"]))["comments"][-1]["content"] == (
        "Status changed from Resolved to Escalated"
    )


async def test_skipping_ahead_conflicts(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _move(async_client, ticket["id"], "Closed")
    assert resp.status_code == 409
    assert (await _get(async_client, ticket["id"]))["comments"] == []


async def test_assigned_requires_assignee(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _move(async_client, ticket["id"], "Assigned")
    assert resp.status_code == 422
    assert (await _get(async_client, ticket["id"]))["status"] == "Open"


async def test_unknown_assignee_rejected(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _move(async_client, ticket["id"], "Assigned", assignee_id=uuid.uuid4())
    assert resp.status_code == 422


async def test_reassignment_keeps_status(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", assignee_id=IT1_ID)

    resp = await _move(async_client, ticket["id"], "Assigned", assignee_id=IT2_ID)
    assert resp.status_code == 200
    assert (await _get(async_client, ticket["id"]))["assignee_id"] == str(IT2_ID)
    assert "Ticket Assigned" in await _titles(async_client, IT2)


async def test_repeating_status_without_reassignment_conflicts(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", assignee_id=IT1_ID)
    resp = await _move(async_client, ticket["id"], "Assigned", assignee_id=IT1_ID)
    assert resp.status_code == 409


async def test_assignment_notifies_creator_and_assignee(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", headers=IT1, assignee_id=IT2_ID)

    assert await _titles(async_client, CREATOR) == ["Ticket Updated"]
    assert await _titles(async_client, IT2) == ["Ticket Assigned", "New Support Ticket"]


async def test_self_assignment_does_not_notify_actor(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", headers=IT1, assignee_id=IT1_ID)
    assert await _titles(async_client, IT1) == ["New Support Ticket"]


async def test_escalation_notifies_creator(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Escalated")
    resp = await async_client.get(NOTIFICATIONS_URL, headers=CREATOR)
    assert [n["type"] for n in resp.json()["items"]] == ["escalation"]


async def test_status_change_unknown_ticket(async_client: AsyncClient) -> None:
    resp = await _move(async_client, str(uuid.uuid4()), "In_Progress")
    assert resp.status_code == 404


async def test_unknown_status_value(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _move(async_client, ticket["id"], "in progress")
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def _comment(client: AsyncClient, ticket_id: str, headers: dict[str, str], content: str = "Any update?") -> Any:
    return await client.post(f"{TICKETS_URL}/{ticket_id}/comments", json={"content": content}, headers=headers)


async def test_comment_appends_history(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _comment(async_client, ticket["id"], CREATOR)
    assert resp.status_code == 201
    comment = resp.json()
    assert comment["sequence"] == 1
    assert comment["author_id"] == str(CREATOR_ID)
    assert comment["author_name"] == "Cora Creator"
    assert comment["is_system"] is False

    detail = await _get(async_client, ticket["id"])
    assert [c["content"] for c in detail["comments"]] == ["Any update?"]


async def test_comment_by_creator_notifies_assignee_only(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", headers=IT1, assignee_id=IT2_ID)
    await _comment(async_client, ticket["id"], CREATOR)

    assert "New Ticket Comment" not in await _titles(async_client, CREATOR)
    assert (await _titles(async_client, IT2)).count("New Ticket Comment") == 1


async def test_comment_by_assignee_notifies_creator_only(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", headers=IT1, assignee_id=IT2_ID)
    await _comment(async_client, ticket["id"], IT2, content="On my way")

    assert (await _titles(async_client, CREATOR)).count("New Ticket Comment") == 1
    assert "New Ticket Comment" not in await _titles(async_client, IT2)


async def test_comment_by_third_party_notifies_creator_and_assignee(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", headers=IT1, assignee_id=IT2_ID)
    await _comment(async_client, ticket["id"], BYSTANDER, content="Same here")

    assert (await _titles(async_client, CREATOR)).count("New Ticket Comment") == 1
    assert (await _titles(async_client, IT2)).count("New Ticket Comment") == 1
    assert await _titles(async_client, BYSTANDER) == []


async def test_comment_sequence_continues_after_status_notes(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "In_Progress")
    resp = await _comment(async_client, ticket["id"], CREATOR)
    assert resp.json()["sequence"] == 2


async def test_blank_comment_rejected(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    resp = await _comment(async_client, ticket["id"], CREATOR, content="   ")
    assert resp.status_code == 422


async def test_comment_unknown_ticket(async_client: AsyncClient) -> None:
    resp = await _comment(async_client, str(uuid.uuid4()), CREATOR)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_list_visibility(async_client: AsyncClient) -> None:
    mine = await _create(async_client)
    theirs = await _create(async_client, headers=BYSTANDER)
    await _move(async_client, theirs["id"], "Assigned", assignee_id=IT2_ID)

    async def _ids(headers: dict[str, str], **params: str) -> set[str]:
        resp = await async_client.get(TICKETS_URL, headers=headers, params=params)
        assert resp.status_code == 200
        return {item["id"] for item in resp.json()["items"]}

    assert await _ids(CREATOR) == {mine["id"]}
    assert await _ids(BYSTANDER) == {theirs["id"]}
    assert await _ids(IT1) == {mine["id"], theirs["id"]}
    assert await _ids(IT1, status="Assigned") == {theirs["id"]}


async def test_assignee_sees_ticket_without_it_role(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)
    await _move(async_client, ticket["id"], "Assigned", assignee_id=BYSTANDER_ID)
    resp = await async_client.get(TICKETS_URL, headers=BYSTANDER)
    assert [item["id"] for item in resp.json()["items"]] == [ticket["id"]]


async def test_get_ticket_follows_list_visibility(async_client: AsyncClient) -> None:
    ticket = await _create(async_client)

    resp = await async_client.get(f"{TICKETS_URL}/{ticket['id']}", headers=BYSTANDER)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Ticket not found"

    await _move(async_client, ticket["id"], "Assigned", assignee_id=BYSTANDER_ID)
    for headers in (CREATOR, BYSTANDER, IT2):
        resp = await async_client.get(f"{TICKETS_URL}/{ticket['id']}", headers=headers)
        assert resp.status_code == 200
