"""Vehicle-related service helpers."""

import logging
from collections.abc import Callable, Mapping
from datetime import date, timedelta
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from vehicle_care.core.config import DuePolicy, due_policy
from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.db.models import User, Vehicle
from vehicle_care.intelligence.due_calculator import (
    DueStatus,
    evaluate_due_status,
    initial_service_due,
)
from vehicle_care.services import realtime

logger = logging.getLogger(__name__)

SERVICE_DUE_EVENT = "service-due"
UPDATABLE_FIELDS = frozenset(
    {
        "make",
        "model",
        "year",
        "color",
        "chassis_number",
        "current_mileage",
        "next_service_due",
        "next_service_date",
    }
)


def list_vehicles_with_owners(db: Session, *criteria) -> list[Vehicle]:
    """Return vehicles matching ``criteria`` with their owner eagerly loaded."""
    return db.scalars(
        select(Vehicle)
        .options(joinedload(Vehicle.owner))
        .where(*criteria)
        .order_by(Vehicle.id.asc())
    ).unique().all()


def _assert_can_access(vehicle: Vehicle, user: User) -> None:
    if user.role != "admin" and vehicle.owner_id != user.id:
        raise DomainException(
            code=ErrorCode.NOT_AUTHORIZED,
            message="Not authorized to access this vehicle."
        )


def get_vehicle(db: Session, vehicle_id: int, user: User) -> Vehicle:
    vehicle = db.scalar(select(Vehicle).where(Vehicle.id == vehicle_id))
    if vehicle is None:
        raise DomainException(
            code=ErrorCode.VEHICLE_NOT_FOUND,
            message="Vehicle not found."
        )
    _assert_can_access(vehicle, user)
    return vehicle


def list_vehicles(db: Session, user: User) -> list[Vehicle]:
    query = select(Vehicle).order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
    if user.role != "admin":
        query = query.where(Vehicle.owner_id == user.id)
    return db.scalars(query).all()


def create_vehicle(
    db: Session,
    owner: User,
    plate_number: str,
    current_mileage: int = 0,
    chassis_number: str | None = None,
    make: str | None = None,
    model: str | None = None,
    year: int | None = None,
    color: str | None = None,
    next_service_due: int | None = None,
    policy: DuePolicy = due_policy,
) -> Vehicle:
    """Register a vehicle; the first threshold is one interval past the odometer."""
    duplicate_filters = [Vehicle.plate_number == plate_number]
    if chassis_number:
        duplicate_filters.append(Vehicle.chassis_number == chassis_number)

    existing = db.scalar(select(Vehicle.id).where(or_(*duplicate_filters)))
    if existing is not None:
        raise DomainException(
            code=ErrorCode.DUPLICATE_VEHICLE,
            message="Plate number or chassis number already exists."
        )

    vehicle = Vehicle(
        owner_id=owner.id,
        plate_number=plate_number,
        chassis_number=chassis_number,
        make=make,
        model=model,
        year=year,
        color=color,
        current_mileage=current_mileage,
        next_service_due=(
            next_service_due
            if next_service_due is not None
            else initial_service_due(current_mileage, policy)
        ),
    )
    try:
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "Vehicle created",
        extra={"vehicle_id": vehicle.id, "owner_id": owner.id},
    )
    return vehicle


def update_vehicle(
    db: Session,
    vehicle_id: int,
    user: User,
    changes: Mapping[str, Any],
    publish: Callable[[int, str, dict[str, Any]], Any] | None = None,
) -> Vehicle:
    """Apply field changes; an odometer reading past the threshold is pushed to the owner."""
    vehicle = get_vehicle(db, vehicle_id, user)

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise DomainException(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"Cannot update fields: {', '.join(sorted(unknown))}."
        )

    new_mileage = changes.get("current_mileage")
    mileage_changed = new_mileage is not None and new_mileage != vehicle.current_mileage

    try:
        for field_name, value in changes.items():
            setattr(vehicle, field_name, value)
        db.commit()
        db.refresh(vehicle)
    except SQLAlchemyError:
        db.rollback()
        raise

    if mileage_changed and vehicle.current_mileage >= vehicle.next_service_due:
        publish = publish or realtime.publish_to_owner
        try:
            publish(
                vehicle.owner_id,
                SERVICE_DUE_EVENT,
                {
                    "vehicle_id": vehicle.id,
                    "plate_number": vehicle.plate_number,
                    "current_mileage": vehicle.current_mileage,
                    "due_mileage": vehicle.next_service_due,
                },
            )
        except Exception:
            logger.exception("Failed to push service-due event for vehicle %d.", vehicle.id)

    return vehicle


def delete_vehicle(db: Session, vehicle_id: int, user: User) -> None:
    """Delete a vehicle together with its service records and notifications."""
    vehicle = get_vehicle(db, vehicle_id, user)
    try:
        db.delete(vehicle)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Vehicle deleted", extra={"vehicle_id": vehicle_id})


def list_due_vehicles(
    db: Session,
    user: User,
    today: date | None = None,
    policy: DuePolicy = due_policy,
) -> list[tuple[Vehicle, DueStatus]]:
    """Vehicles due for service within the dashboard horizon, soonest threshold first."""
    if today is None:
        today = date.today()
    horizon = today + timedelta(days=policy.dashboard_horizon_days)

    query = (
        select(Vehicle)
        .options(joinedload(Vehicle.owner))
        .where(
            or_(
                Vehicle.current_mileage >= Vehicle.next_service_due,
                Vehicle.next_service_date <= horizon,
            )
        )
        .order_by(Vehicle.next_service_due.asc())
    )
    if user.role != "admin":
        query = query.where(Vehicle.owner_id == user.id)

    return [
        (
            vehicle,
            evaluate_due_status(
                current_mileage=vehicle.current_mileage,
                next_service_due=vehicle.next_service_due,
                next_service_date=vehicle.next_service_date,
                now=today,
                horizon_days=policy.dashboard_horizon_days,
                policy=policy,
            ),
        )
        for vehicle in db.scalars(query).unique().all()
    ]
