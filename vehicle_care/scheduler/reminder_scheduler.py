"""Time-triggered service reminder scans.

Uses APScheduler BackgroundScheduler to run three cron jobs:

- 09:00 daily: due-check. Vehicles whose service date is within the scheduler
  horizon or whose odometer passed the mileage ratio get a reminder on every
  channel the owner has enabled.
- 10:00 daily: upcoming-check. Vehicles whose service date is exactly the
  lead time away get an email-only heads-up.
- 08:00 Monday: weekly report. Owners with at least one service in the last
  7 days get a summary email.

A failing vehicle or owner is logged and counted; it never stops the batch.
Jobs are not guarded across processes; run the scheduler on a single instance.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, timedelta

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import or_
from sqlalchemy.orm import Session

from vehicle_care.core.config import DuePolicy, due_policy
from vehicle_care.db.models import Vehicle
from vehicle_care.db.session import SessionLocal
from vehicle_care.intelligence.due_calculator import is_upcoming, scan_due_status
from vehicle_care.services.message_templates import upcoming_service_email, weekly_report_email
from vehicle_care.services.notification_dispatcher import (
    DispatchResult,
    Transports,
    default_transports,
    dispatch_service_due,
)
from vehicle_care.services.report_service import weekly_owner_summaries
from vehicle_care.services.vehicle_service import list_vehicles_with_owners

logger = logging.getLogger(__name__)

DUE_CHECK = "due_check"
UPCOMING_CHECK = "upcoming_check"
WEEKLY_REPORT = "weekly_report"

# Dedupe keys older than this are dropped when the due-check runs.
STATE_RETENTION_DAYS = 2


@dataclass
class SchedulerState:
    """Dedupe memory shared by the scans of one scheduler.

    A key is ``(scan, vehicle_id, day)``. It is recorded only once a reminder
    actually went out, so a vehicle whose channels all failed is retried on
    the next run.
    """

    notified: set[tuple[str, int, date]] = field(default_factory=set)

    def already_notified(self, scan: str, vehicle_id: int, day: date) -> bool:
        return (scan, vehicle_id, day) in self.notified

    def mark_notified(self, scan: str, vehicle_id: int, day: date) -> None:
        self.notified.add((scan, vehicle_id, day))

    def prune(self, before: date) -> None:
        self.notified = {key for key in self.notified if key[2] >= before}


@dataclass
class ScanSummary:
    scan: str
    candidates: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[DispatchResult] = field(default_factory=list)

    def log(self) -> None:
        logger.info(
            "%s complete: %d sent, %d failed, %d skipped out of %d candidates.",
            self.scan,
            self.sent,
            self.failed,
            self.skipped,
            self.candidates,
        )


def check_due_services(
    db: Session,
    today: date | None = None,
    state: SchedulerState | None = None,
    policy: DuePolicy = due_policy,
    transports: Transports | None = None,
) -> ScanSummary:
    """Remind owners of vehicles that are overdue or close to the mileage threshold."""
    if today is None:
        today = date.today()
    transports = transports or default_transports()
    summary = ScanSummary(scan=DUE_CHECK)

    if state is not None:
        state.prune(today - timedelta(days=STATE_RETENTION_DAYS))

    vehicles = list_vehicles_with_owners(
        db,
        or_(
            Vehicle.next_service_date <= today + timedelta(days=policy.scheduler_horizon_days),
            Vehicle.current_mileage >= Vehicle.next_service_due * policy.scan_mileage_ratio,
        ),
    )

    for vehicle in vehicles:
        status = scan_due_status(
            current_mileage=vehicle.current_mileage,
            next_service_due=vehicle.next_service_due,
            next_service_date=vehicle.next_service_date,
            now=today,
            policy=policy,
        )
        if status is None:
            continue
        summary.candidates += 1

        if vehicle.owner is None:
            logger.warning("Vehicle %d has no owner. Skipping.", vehicle.id)
            summary.skipped += 1
            continue

        if state is not None and state.already_notified(DUE_CHECK, vehicle.id, today):
            logger.debug("Vehicle %d already reminded on %s. Skipping.", vehicle.id, today)
            summary.skipped += 1
            continue

        try:
            result = dispatch_service_due(db, vehicle, status, transports=transports)
        except Exception:
            logger.exception("Failed to dispatch reminder for vehicle %d.", vehicle.id)
            db.rollback()
            summary.failed += 1
            continue

        summary.results.append(result)
        if result.delivered:
            summary.sent += 1
            if state is not None:
                state.mark_notified(DUE_CHECK, vehicle.id, today)
        else:
            summary.failed += 1

    summary.log()
    return summary


def check_upcoming_services(
    db: Session,
    today: date | None = None,
    state: SchedulerState | None = None,
    policy: DuePolicy = due_policy,
    transports: Transports | None = None,
) -> ScanSummary:
    """Email owners whose service date is exactly ``upcoming_lead_days`` away."""
    if today is None:
        today = date.today()
    transports = transports or default_transports()
    summary = ScanSummary(scan=UPCOMING_CHECK)
    target = today + timedelta(days=policy.upcoming_lead_days)

    vehicles = list_vehicles_with_owners(db, Vehicle.next_service_date == target)

    for vehicle in vehicles:
        if not is_upcoming(vehicle.next_service_date, today, policy.upcoming_lead_days):
            continue
        summary.candidates += 1

        owner = vehicle.owner
        if owner is None:
            logger.warning("Vehicle %d has no owner. Skipping.", vehicle.id)
            summary.skipped += 1
            continue

        if state is not None and state.already_notified(UPCOMING_CHECK, vehicle.id, today):
            summary.skipped += 1
            continue

        subject, html_body = upcoming_service_email(owner, vehicle)
        try:
            sent = transports.send_email(owner.email, subject, html_body)
        except Exception:
            logger.exception("Failed to send upcoming reminder for vehicle %d.", vehicle.id)
            sent = False

        if sent:
            summary.sent += 1
            if state is not None:
                state.mark_notified(UPCOMING_CHECK, vehicle.id, today)
        else:
            summary.failed += 1

    summary.log()
    return summary


def send_weekly_reports(
    db: Session,
    today: date | None = None,
    transports: Transports | None = None,
) -> ScanSummary:
    """Email each owner with services in the trailing week a count and cost summary."""
    transports = transports or default_transports()
    summary = ScanSummary(scan=WEEKLY_REPORT)

    for owner_summary in weekly_owner_summaries(db, today=today):
        summary.candidates += 1
        owner = owner_summary.owner
        subject, html_body = weekly_report_email(
            owner,
            owner_summary.service_count,
            owner_summary.total_cost,
        )
        try:
            sent = transports.send_email(owner.email, subject, html_body)
        except Exception:
            logger.exception("Failed to send weekly report to user %d.", owner.id)
            sent = False

        if sent:
            summary.sent += 1
        else:
            summary.failed += 1

    summary.log()
    return summary


def _run_scan(scan: Callable[..., ScanSummary], **kwargs) -> None:
    """Run one scan in its own session; nothing escapes to the scheduler thread."""
    logger.info("Running %s for %s", scan.__name__, date.today())
    db = SessionLocal()
    try:
        scan(db, **kwargs)
    except Exception:
        logger.exception("Unhandled error in %s.", scan.__name__)
    finally:
        db.close()


def start_scheduler(state: SchedulerState | None = None) -> BackgroundScheduler:
    """Create, configure, and start the background reminder scheduler.

    Returns the scheduler instance so the caller can shut it down if needed.
    """
    if state is None:
        state = SchedulerState()

    scheduler = BackgroundScheduler(daemon=True)
    job_defaults = {"max_instances": 1, "coalesce": True, "replace_existing": True}

    scheduler.add_job(
        _run_scan,
        trigger="cron",
        hour=9,
        minute=0,
        id="daily_due_check",
        name="Remind owners of vehicles due for service",
        args=[check_due_services],
        kwargs={"state": state},
        **job_defaults,
    )
    scheduler.add_job(
        _run_scan,
        trigger="cron",
        hour=10,
        minute=0,
        id="daily_upcoming_check",
        name="Email owners a week before their service date",
        args=[check_upcoming_services],
        kwargs={"state": state},
        **job_defaults,
    )
    scheduler.add_job(
        _run_scan,
        trigger="cron",
        day_of_week="mon",
        hour=8,
        minute=0,
        id="weekly_service_report",
        name="Send weekly service summaries",
        args=[send_weekly_reports],
        **job_defaults,
    )

    scheduler.start()
    logger.info(
        "Reminder scheduler started (due-check 09:00, upcoming-check 10:00, weekly report Mon 08:00)."
    )
    return scheduler
