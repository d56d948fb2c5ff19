"""Seed script for development data.

Run with:  python -m servicehub.seed   (against a server on localhost:8000)

The directory is an in-memory stub, so rerun this after every API restart.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
COMPANY_ID = "00000000-0000-0000-0000-000000000001"

# Well-known user UUIDs
ROOT_ID = "00000000-0000-0000-0000-000000000001"
ALICE_ID = "00000000-0000-0000-0000-000000000002"
BOB_ID = "00000000-0000-0000-0000-000000000003"
CAROL_ID = "00000000-0000-0000-0000-000000000004"
DAVE_ID = "00000000-0000-0000-0000-000000000005"
ERIN_ID = "00000000-0000-0000-0000-000000000006"

EMPLOYEES = [
    {
        "id": ROOT_ID,
        "name": "Root Admin",
        "email": "root@example.com",
        "role": "SUPER_ADMIN",
        "department": "Operations",
    },
    {
        "id": BOB_ID,
        "name": "Bob Smith",
        "email": "bob.smith@example.com",
        "role": "MANAGER",
        "department": "Engineering",
        "title": "Engineering Manager",
    },
    {
        "id": ALICE_ID,
        "name": "Alice Johnson",
        "email": "alice.johnson@example.com",
        "role": "EMPLOYEE",
        "department": "Engineering",
        "title": "Software Engineer",
        "manager_id": BOB_ID,
    },
    {
        "id": CAROL_ID,
        "name": "Carol Williams",
        "email": "carol.williams@example.com",
        "role": "HR_ADMIN",
        "department": "People",
    },
    {
        "id": DAVE_ID,
        "name": "Dave Brown",
        "email": "dave.brown@example.com",
        "role": "IT_ADMIN",
        "department": "IT",
    },
    {
        "id": ERIN_ID,
        "name": "Erin Davis",
        "email": "erin.davis@example.com",
        "role": "FINANCE_ADMIN",
        "department": "Finance",
    },
]


def _headers(user_id: str, role: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Company-Id": COMPANY_ID,
        "X-User-Id": user_id,
        "X-Role": role,
    }


ROOT = _headers(ROOT_ID, "SUPER_ADMIN")
ALICE = _headers(ALICE_ID, "EMPLOYEE")
BOB = _headers(BOB_ID, "MANAGER")
CAROL = _headers(CAROL_ID, "HR_ADMIN")
DAVE = _headers(DAVE_ID, "IT_ADMIN")
ERIN = _headers(ERIN_ID, "FINANCE_ADMIN")


async def _post(client: httpx.AsyncClient, path: str, json: dict, headers: dict[str, str], label: str) -> dict | None:
    """POST and report; a 409 means the step already happened."""
    resp = await client.post(f"{BASE_URL}/companies/{COMPANY_ID}{path}", json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} ({resp.json().get('detail')})")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed the directory via PUT (upsert)."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        body = {k: v for k, v in emp.items() if k != "id"}
        resp = await client.put(
            f"{BASE_URL}/companies/{COMPANY_ID}/employees/{emp['id']}",
            json=body,
            headers=ROOT,
        )
        if resp.status_code == 200:
            print(f"  [OK] {emp['name']} ({emp['role']})")
        else:
            print(f"  [ERROR] {emp['name']}: {resp.status_code} {resp.text[:200]}")


async def seed_leaves(client: httpx.AsyncClient) -> None:
    """Seed one leave that runs the full approval chain and one left pending."""
    print("\n--- Seeding leaves ---")
    start = date.today() + timedelta(days=14)
    approved = await _post(
        client,
        "/leaves",
        {
            "leave_type": "Annual",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=4)).isoformat(),
            "reason": "Family vacation",
        },
        ALICE,
        "Leave: Alice annual leave",
    )
    if approved:
        await _post(
            client,
            f"/leaves/{approved['id']}/transition",
            {"action": "approve", "comment": "Enjoy"},
            BOB,
            "Bob approves -> Pending_HR",
        )
        await _post(
            client,
            f"/leaves/{approved['id']}/transition",
            {"action": "approve", "comment": "Balance checked"},
            CAROL,
            "Carol approves -> Approved",
        )

    sick_day = date.today() + timedelta(days=3)
    await _post(
        client,
        "/leaves",
        {
            "leave_type": "Sick",
            "start_date": sick_day.isoformat(),
            "end_date": sick_day.isoformat(),
            "reason": "Doctor appointment",
        },
        ALICE,
        "Leave: Alice sick day (Pending_Manager)",
    )


async def seed_expenses(client: httpx.AsyncClient) -> None:
    """Seed an expense that is approved and paid."""
    print("\n--- Seeding expenses ---")
    expense = await _post(
        client,
        "/expenses",
        {
            "title": "Conference travel",
            "description": "Flights and hotel for PyCon",
            "amount": "1850.00",
            "currency": "USD",
            "category": "Travel",
        },
        ALICE,
        "Expense: Alice conference travel",
    )
    if expense:
        await _post(client, f"/expenses/{expense['id']}/transition", {"action": "approve"}, BOB, "Bob approves")
        await _post(client, f"/expenses/{expense['id']}/transition", {"action": "approve"}, ERIN, "Erin approves")
        await _post(client, f"/expenses/{expense['id']}/pay", {"comment": "Reimbursed"}, ERIN, "Erin marks paid")


async def seed_tickets(client: httpx.AsyncClient) -> None:
    """Seed a critical ticket that gets assigned and worked on."""
    print("\n--- Seeding tickets ---")
    ticket = await _post(
        client,
        "/tickets",
        {
            "title": "VPN drops every few minutes",
            "description": "Cannot stay connected to the office VPN since this morning.",
            "category": "Network",
            "priority": "Critical",
        },
        ALICE,
        "Ticket: Alice VPN outage",
    )
    if ticket:
        await _post(
            client,
            f"/tickets/{ticket['id']}/status",
            {"status": "Assigned", "assignee_id": DAVE_ID},
            DAVE,
            "Dave takes the ticket",
        )
        await _post(client, f"/tickets/{ticket['id']}/status", {"status": "In_Progress"}, DAVE, "Dave starts work")
        await _post(
            client,
            f"/tickets/{ticket['id']}/comments",
            {"content": "Looks like a certificate issue, rolling out a fix."},
            DAVE,
            "Dave comments",
        )


async def main() -> None:
    print("=" * 60)
    print("  ServiceHub - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_employees(client)
        await seed_leaves(client)
        await seed_expenses(client)
        await seed_tickets(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
