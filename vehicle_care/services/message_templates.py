"""Subject/body builders for reminder emails, SMS and in-app messages."""

import html
from datetime import date

from vehicle_care.db.models import User, Vehicle
from vehicle_care.intelligence.due_calculator import DueStatus

SERVICE_DUE_TITLE = "Service Due"


def _fmt_date(value: date | None) -> str:
    return value.isoformat() if value else "not scheduled"


def _fmt_miles(value: int) -> str:
    return f"{value:,}"


def service_reminder_email(owner: User, vehicle: Vehicle, status: DueStatus) -> tuple[str, str]:
    headline = "is overdue for service" if status is DueStatus.OVERDUE else "is due for service soon"
    subject = f"Service Reminder: {vehicle.plate_number}"
    body = (
        f"<p>Hello {html.escape(owner.username)},</p>\n"
        f"<p>Your vehicle <strong>{html.escape(vehicle.plate_number)}</strong> {headline}.</p>\n"
        f"<p>Current mileage: {_fmt_miles(vehicle.current_mileage)}</p>\n"
        f"<p>Service due at: {_fmt_miles(vehicle.next_service_due)}</p>\n"
        f"<p>Due date: {_fmt_date(vehicle.next_service_date)}</p>\n"
        "<p>Please schedule a service appointment.</p>"
    )
    return subject, body


def upcoming_service_email(owner: User, vehicle: Vehicle) -> tuple[str, str]:
    subject = f"Upcoming Service: {vehicle.plate_number} on {_fmt_date(vehicle.next_service_date)}"
    body = (
        f"<p>Hello {html.escape(owner.username)},</p>\n"
        f"<p>Your vehicle <strong>{html.escape(vehicle.plate_number)}</strong> has a service "
        f"scheduled for {_fmt_date(vehicle.next_service_date)}.</p>\n"
        f"<p>Current mileage: {_fmt_miles(vehicle.current_mileage)}</p>\n"
        "<p>Book a slot now to keep your preferred time.</p>"
    )
    return subject, body


def weekly_report_email(owner: User, service_count: int, total_cost: float) -> tuple[str, str]:
    subject = "Your Weekly Service Report"
    body = (
        f"<p>Hello {html.escape(owner.username)},</p>\n"
        f"<p>Services in the last 7 days: {service_count}</p>\n"
        f"<p>Total cost: {total_cost:.2f}</p>"
    )
    return subject, body


def service_reminder_sms(vehicle: Vehicle) -> str:
    return (
        f"Service Reminder: Vehicle {vehicle.plate_number} is due for service. "
        f"Current mileage: {vehicle.current_mileage}"
    )


def service_due_in_app(vehicle: Vehicle) -> tuple[str, str]:
    return (
        SERVICE_DUE_TITLE,
        f"Vehicle {vehicle.plate_number} is due for service. "
        "Please schedule a service appointment.",
    )
