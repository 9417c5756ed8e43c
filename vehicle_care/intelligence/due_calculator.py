"""Deterministic service-due evaluation.

Everything here is a pure function of its arguments so it can be exercised
without a database. A vehicle is:

- ``overdue`` when the odometer has reached ``next_service_due`` or the
  ``next_service_date`` falls within the horizon (3 days for the daily scan,
  7 days for the on-demand list);
- ``due_soon`` when fewer than ``due_soon_miles`` remain or the service date
  is at most ``due_soon_days`` away;
- ``ok`` otherwise.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from vehicle_care.core.config import DuePolicy, due_policy


class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    OK = "ok"


@dataclass(frozen=True)
class NextService:
    due_mileage: int
    due_date: date


def _as_date(now: date | datetime) -> date:
    # datetime is a subclass of date, so test it first.
    if isinstance(now, datetime):
        return now.date()
    return now


def evaluate_due_status(
    current_mileage: int,
    next_service_due: int,
    next_service_date: date | None,
    now: date | datetime,
    horizon_days: int,
    policy: DuePolicy = due_policy,
) -> DueStatus:
    """Classify a vehicle as overdue, due soon or ok."""
    today = _as_date(now)

    if current_mileage >= next_service_due:
        return DueStatus.OVERDUE

    if next_service_date is not None and next_service_date <= today + timedelta(days=horizon_days):
        return DueStatus.OVERDUE

    if next_service_due - current_mileage < policy.due_soon_miles:
        return DueStatus.DUE_SOON

    if next_service_date is not None and (next_service_date - today).days <= policy.due_soon_days:
        return DueStatus.DUE_SOON

    return DueStatus.OK


def scan_due_status(
    current_mileage: int,
    next_service_due: int,
    next_service_date: date | None,
    now: date | datetime,
    policy: DuePolicy = due_policy,
) -> DueStatus | None:
    """Return the status to remind about in the daily scan, or None to skip.

    The scan matches on the scheduler horizon or on the odometer reaching
    ``scan_mileage_ratio`` of the threshold. A mileage-ratio match that the
    calculator still rates ``ok`` is reported as ``due_soon``.
    """
    status = evaluate_due_status(
        current_mileage=current_mileage,
        next_service_due=next_service_due,
        next_service_date=next_service_date,
        now=now,
        horizon_days=policy.scheduler_horizon_days,
        policy=policy,
    )
    if status is DueStatus.OVERDUE:
        return status

    if current_mileage >= next_service_due * policy.scan_mileage_ratio:
        return DueStatus.DUE_SOON

    return None


def initial_service_due(current_mileage: int, policy: DuePolicy = due_policy) -> int:
    """Mileage threshold assigned to a newly registered vehicle."""
    return current_mileage + policy.service_interval_miles


def calculate_next_service(
    mileage_at_service: int,
    service_date: date,
    policy: DuePolicy = due_policy,
) -> NextService:
    """Return the next due mileage and date after a service."""
    return NextService(
        due_mileage=mileage_at_service + policy.service_interval_miles,
        due_date=service_date + timedelta(days=policy.service_interval_days),
    )


def is_upcoming(next_service_date: date | None, now: date | datetime, lead_days: int) -> bool:
    """True only when the service date is exactly ``lead_days`` away."""
    if next_service_date is None:
        return False
    return next_service_date == _as_date(now) + timedelta(days=lead_days)
