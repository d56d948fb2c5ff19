"""Tests for company-wide search across the directory, tickets and leave requests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest

from servicehub.models.enums import UserRole
from servicehub.services.employee import EmployeeInfo

if TYPE_CHECKING:
    from httpx import AsyncClient

    from servicehub.services.employee import InMemoryEmployeeService

COMPANY_ID = uuid.uuid4()
OTHER_COMPANY_ID = uuid.uuid4()
AMY_ID = uuid.uuid4()
BEN_ID = uuid.uuid4()
HR_ID = uuid.uuid4()
IT_ID = uuid.uuid4()

BASE_URL = f"/companies/{COMPANY_ID}"
SEARCH_URL = f"{BASE_URL}/search"


def _headers(user_id: uuid.UUID, role: UserRole = UserRole.EMPLOYEE) -> dict[str, str]:
    return {
        "X-Company-Id": str(COMPANY_ID),
        "X-User-Id": str(user_id),
        "X-Role": role.value,
    }


AMY = _headers(AMY_ID)
BEN = _headers(BEN_ID)
HR = _headers(HR_ID, UserRole.HR_ADMIN)
IT = _headers(IT_ID, UserRole.IT_ADMIN)


@pytest.fixture(autouse=True)
def _seed_directory(directory: InMemoryEmployeeService) -> None:
    for user_id, name, role, department in [
        (AMY_ID, "Amy Archer", UserRole.EMPLOYEE, "Design"),
        (BEN_ID, "Ben Baker", UserRole.EMPLOYEE, "Engineering"),
        (HR_ID, "Hana Hughes", UserRole.HR_ADMIN, "People"),
        (IT_ID, "Ivan Ito", UserRole.IT_ADMIN, "Engineering"),
    ]:
        directory.seed(
            EmployeeInfo(
                id=user_id,
                company_id=COMPANY_ID,
                name=name,
                email=f"{name.split()[0].lower()}@example.com",
                role=role,
                department=department,
            )
        )
    directory.seed(
        EmployeeInfo(
            id=uuid.uuid4(),
            company_id=OTHER_COMPANY_ID,
            name="Bernard Elsewhere",
            email="bernard@other.example.com",
            department="Engineering",
        )
    )


async def _ticket(client: AsyncClient, headers: dict[str, str], title: str, description: str = "Details") -> str:
    resp = await client.post(
        f"{BASE_URL}/tickets",
        json={"title": title, "description": description, "category": "Hardware", "priority": "Low"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def _leave(client: AsyncClient, headers: dict[str, str], leave_type: str, reason: str) -> str:
    resp = await client.post(
        f"{BASE_URL}/leaves",
        json={"leave_type": leave_type, "start_date": "2026-05-04", "end_date": "2026-05-05", "reason": reason},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def _search(client: AsyncClient, q: str, headers: dict[str, str] = HR) -> dict[str, Any]:
    resp = await client.get(SEARCH_URL, params={"q": q}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Query validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("q", ["", "a", "  b  "])
async def test_short_query_rejected(async_client: AsyncClient, q: str) -> None:
    resp = await async_client.get(SEARCH_URL, params={"q": q}, headers=AMY)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Search query must be at least 2 characters"


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


async def test_people_match_name_email_and_department(async_client: AsyncClient) -> None:
    data = await _search(async_client, "engineering")
    assert [e["name"] for e in data["employees"]] == ["Ben Baker", "Ivan Ito"]

    data = await _search(async_client, "AMY@")
    assert [e["name"] for e in data["employees"]] == ["Amy Archer"]
    assert data["employees"][0]["department"] == "Design"


async def test_people_are_company_scoped(async_client: AsyncClient) -> None:
    data = await _search(async_client, "bernard")
    assert data["employees"] == []


# ---------------------------------------------------------------------------
# Tickets and leave requests
# ---------------------------------------------------------------------------


async def test_tickets_match_title_or_description(async_client: AsyncClient) -> None:
    by_title = await _ticket(async_client, AMY, "Printer jammed")
    by_description = await _ticket(async_client, AMY, "Office hardware", description="The PRINTER on floor 2")
    await _ticket(async_client, AMY, "VPN drops")

    data = await _search(async_client, "printer", headers=IT)
    assert {t["id"] for t in data["tickets"]} == {by_title, by_description}
    assert data["tickets"][0]["created_by_name"] == "Amy Archer"


async def test_ticket_hits_follow_visibility(async_client: AsyncClient) -> None:
    mine = await _ticket(async_client, AMY, "Monitor flicker")
    await _ticket(async_client, BEN, "Monitor missing")

    assert [t["id"] for t in (await _search(async_client, "monitor", headers=AMY))["tickets"]] == [mine]
    assert len((await _search(async_client, "monitor", headers=IT))["tickets"]) == 2


async def test_leaves_match_reason_or_type(async_client: AsyncClient) -> None:
    sick = await _leave(async_client, AMY, "Sick", "Dentist appointment")
    annual = await _leave(async_client, AMY, "Annual", "Family trip")

    assert [lv["id"] for lv in (await _search(async_client, "dentist"))["leaves"]] == [sick]
    hits = (await _search(async_client, "annual"))["leaves"]
    assert [lv["id"] for lv in hits] == [annual]
    assert hits[0]["employee_name"] == "Amy Archer"
    assert hits[0]["status"] == "Pending_HR"


async def test_leave_hits_follow_visibility(async_client: AsyncClient) -> None:
    await _leave(async_client, AMY, "Personal", "Moving house")
    assert (await _search(async_client, "moving", headers=BEN))["leaves"] == []
    assert len((await _search(async_client, "moving", headers=AMY))["leaves"]) == 1


async def test_wildcards_are_matched_literally(async_client: AsyncClient) -> None:
    await _ticket(async_client, AMY, "Disk full")
    await _leave(async_client, AMY, "Annual", "Long weekend")

    data = await _search(async_client, "%%", headers=IT)
    assert data["tickets"] == []
    assert data["leaves"] == []

    percent = await _ticket(async_client, AMY, "Battery at 5%")
    assert [t["id"] for t in (await _search(async_client, "5%", headers=IT))["tickets"]] == [percent]


async def test_results_capped_per_kind(async_client: AsyncClient) -> None:
    for i in range(12):
        await _ticket(async_client, AMY, f"Keyboard issue {i}")
    data = await _search(async_client, "keyboard", headers=IT)
    assert len(data["tickets"]) == 10
    assert data["tickets"][0]["title"] == "Keyboard issue 11"
