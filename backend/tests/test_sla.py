from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from servicehub.models.enums import TicketPriority
from servicehub.services.sla import SLA_WINDOWS, compute_sla_deadline, is_sla_breached, sla_remaining

T0 = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("priority", "hours"),
    [
        (TicketPriority.CRITICAL, 4),
        (TicketPriority.HIGH, 24),
        (TicketPriority.MEDIUM, 48),
        (TicketPriority.LOW, 72),
    ],
)
def test_deadline_from_priority(priority: TicketPriority, hours: int) -> None:
    assert compute_sla_deadline(priority, T0) == T0 + timedelta(hours=hours)


def test_every_priority_has_a_window() -> None:
    assert set(SLA_WINDOWS) == set(TicketPriority)


def test_deadline_accepts_raw_priority_string() -> None:
    assert compute_sla_deadline("Critical", T0) == T0 + timedelta(hours=4)  # type: ignore[arg-type]


def test_critical_breached_after_five_hours() -> None:
    deadline = compute_sla_deadline(TicketPriority.CRITICAL, T0)
    now = T0 + timedelta(hours=5)
    assert sla_remaining(deadline, now) == timedelta(hours=-1)
    assert is_sla_breached(deadline, now)


def test_not_breached_before_deadline() -> None:
    deadline = compute_sla_deadline(TicketPriority.CRITICAL, T0)
    assert sla_remaining(deadline, T0 + timedelta(hours=1)) == timedelta(hours=3)
    assert not is_sla_breached(deadline, T0 + timedelta(hours=1))


def test_breached_exactly_at_deadline() -> None:
    deadline = compute_sla_deadline(TicketPriority.HIGH, T0)
    assert is_sla_breached(deadline, deadline)


def test_remaining_is_non_increasing_between_reads() -> None:
    deadline = datetime.now(UTC) + timedelta(hours=4)
    original = deadline
    first = sla_remaining(deadline)
    second = sla_remaining(deadline)
    assert second <= first
    assert deadline == original
