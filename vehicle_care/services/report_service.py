"""Business logic for owner reporting."""

from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session, joinedload

from vehicle_care.core.config import DuePolicy, due_policy
from vehicle_care.db.models import ServiceRecord, User, Vehicle

WEEKLY_WINDOW_DAYS = 7
RECENT_SERVICES_LIMIT = 10


@dataclass(frozen=True)
class OwnerServiceSummary:
    owner: User
    service_count: int
    total_cost: float


def weekly_owner_summaries(
    db: Session,
    today: date | None = None,
) -> list[OwnerServiceSummary]:
    """Per-owner service count and cost over the trailing week.

    Owners without any service in the window are not returned.
    """
    if today is None:
        today = date.today()
    # Trailing week inclusive of today: today-6 .. today.
    since = today - timedelta(days=WEEKLY_WINDOW_DAYS - 1)

    rows = db.execute(
        select(
            User,
            func.count(ServiceRecord.id),
            func.coalesce(func.sum(ServiceRecord.total_cost), 0.0),
        )
        .join(Vehicle, Vehicle.owner_id == User.id)
        .join(ServiceRecord, ServiceRecord.vehicle_id == Vehicle.id)
        .where(ServiceRecord.service_date >= since)
        .where(ServiceRecord.service_date <= today)
        .group_by(User.id)
        .having(func.count(ServiceRecord.id) > 0)
        .order_by(User.id.asc())
    ).all()

    return [
        OwnerServiceSummary(
            owner=owner,
            service_count=int(count),
            total_cost=round(float(total or 0), 2),
        )
        for owner, count, total in rows
    ]


def _scope_vehicles(query, user: User):
    if user.role != "admin":
        query = query.where(Vehicle.owner_id == user.id)
    return query


def get_dashboard_summary(
    db: Session,
    user: User,
    today: date | None = None,
    policy: DuePolicy = due_policy,
) -> dict:
    """Return vehicle/service totals and recent activity for the dashboard."""
    if today is None:
        today = date.today()
    horizon = today + timedelta(days=policy.dashboard_horizon_days)

    total_vehicles = db.scalar(
        _scope_vehicles(select(func.count(Vehicle.id)), user)
    ) or 0

    # Services are scoped through their vehicle
    total_services = db.scalar(
        _scope_vehicles(
            select(func.count(ServiceRecord.id)).join(ServiceRecord.vehicle),
            user,
        )
    ) or 0

    completed_cost = db.scalar(
        _scope_vehicles(
            select(func.sum(ServiceRecord.total_cost))
            .join(ServiceRecord.vehicle)
            .where(ServiceRecord.status == "completed"),
            user,
        )
    )

    due_vehicles = db.scalar(
        _scope_vehicles(
            select(func.count(Vehicle.id)).where(
                or_(
                    Vehicle.current_mileage >= Vehicle.next_service_due,
                    Vehicle.next_service_date <= horizon,
                )
            ),
            user,
        )
    ) or 0

    recent = db.scalars(
        _scope_vehicles(
            select(ServiceRecord)
            .join(ServiceRecord.vehicle)
            .options(joinedload(ServiceRecord.vehicle))
            .order_by(ServiceRecord.service_date.desc(), ServiceRecord.id.desc())
            .limit(RECENT_SERVICES_LIMIT),
            user,
        )
    ).unique().all()

    return {
        "total_vehicles": int(total_vehicles),
        "total_services": int(total_services),
        "total_completed_cost": float(completed_cost or 0),
        "vehicles_due": int(due_vehicles),
        "recent_services": [
            {
                "id": record.id,
                "plate_number": record.vehicle.plate_number,
                "service_date": str(record.service_date),
                "status": record.status,
                "total_cost": float(record.total_cost),
            }
            for record in recent
        ],
    }


def get_monthly_report(db: Session, user: User, year: int, month: int) -> dict:
    """Return the services performed in one calendar month with totals."""
    records = db.scalars(
        _scope_vehicles(
            select(ServiceRecord)
            .join(ServiceRecord.vehicle)
            .options(joinedload(ServiceRecord.vehicle))
            .where(extract("year", ServiceRecord.service_date) == year)
            .where(extract("month", ServiceRecord.service_date) == month)
            .order_by(ServiceRecord.service_date.asc(), ServiceRecord.id.asc()),
            user,
        )
    ).unique().all()

    return {
        "month": f"{year}-{month:02d}",
        "total_services": len(records),
        "total_cost": round(sum(float(record.total_cost) for record in records), 2),
        "services": [
            {
                "id": record.id,
                "invoice_number": record.invoice_number,
                "plate_number": record.vehicle.plate_number,
                "service_date": str(record.service_date),
                "mileage_at_service": record.mileage_at_service,
                "status": record.status,
                "total_cost": float(record.total_cost),
            }
            for record in records
        ],
    }
