"""SLA windows for support tickets.

The deadline is fixed once at ticket creation. Remaining time and breach are
derived from it on every read and never written back.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from servicehub.models.enums import TicketPriority

SLA_WINDOWS: dict[TicketPriority, timedelta] = {
    TicketPriority.CRITICAL: timedelta(hours=4),
    TicketPriority.HIGH: timedelta(hours=24),
    TicketPriority.MEDIUM: timedelta(hours=48),
    TicketPriority.LOW: timedelta(hours=72),
}


def compute_sla_deadline(priority: TicketPriority, created_at: datetime) -> datetime:
    """Return the resolution deadline for a ticket opened at ``created_at``."""
    return created_at + SLA_WINDOWS[TicketPriority(priority)]


def sla_remaining(deadline: datetime, now: datetime | None = None) -> timedelta:
    """Time left until the deadline; negative once it has passed."""
    if now is None:
        now = datetime.now(UTC)
    return deadline - now


def is_sla_breached(deadline: datetime, now: datetime | None = None) -> bool:
    """Whether no time remains before the deadline."""
    return sla_remaining(deadline, now) <= timedelta(0)
