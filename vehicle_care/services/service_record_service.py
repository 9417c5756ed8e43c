"""Service record write path and its effect on the vehicle's next service."""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vehicle_care.core.config import DuePolicy, due_policy
from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.db.models import SERVICE_STATUSES, ServiceRecord, User, Vehicle
from vehicle_care.intelligence.due_calculator import calculate_next_service
from vehicle_care.services.vehicle_service import get_vehicle

logger = logging.getLogger(__name__)

# Records in these statuses never move the vehicle's next service.
NON_RECOMPUTING_STATUSES = frozenset({"cancelled"})


def _validate_status(status: str) -> str:
    normalized = status.strip().lower()
    if normalized not in SERVICE_STATUSES:
        raise DomainException(
            code=ErrorCode.INVALID_STATUS,
            message=f"Status must be one of: {', '.join(SERVICE_STATUSES)}."
        )
    return normalized


def generate_invoice_number(db: Session, service_date: date) -> str:
    """Return ``INV-YYYYMM-NNNN`` numbered per calendar month.

    The sequence continues from the highest number issued for the month, so
    deleting a record never frees a number for reuse.
    """
    prefix = f"INV-{service_date.year}{service_date.month:02d}-"
    last_issued = db.scalar(
        select(func.max(ServiceRecord.invoice_number))
        .where(ServiceRecord.invoice_number.like(f"{prefix}%"))
    )
    sequence = int(last_issued[len(prefix):]) + 1 if last_issued else 1
    return f"{prefix}{sequence:04d}"


def apply_service_to_vehicle(
    vehicle: Vehicle,
    record: ServiceRecord,
    policy: DuePolicy = due_policy,
) -> None:
    """Move the vehicle's thresholds one interval past this service.

    A record dated before the vehicle's last service is history only and
    leaves the thresholds alone.
    """
    latest = vehicle.last_service_date
    if latest is None or record.service_date >= latest:
        next_service = calculate_next_service(
            mileage_at_service=record.mileage_at_service,
            service_date=record.service_date,
            policy=policy,
        )
        vehicle.next_service_due = next_service.due_mileage
        vehicle.next_service_date = next_service.due_date
        vehicle.last_service_date = record.service_date

    if record.mileage_at_service > vehicle.current_mileage:
        vehicle.current_mileage = record.mileage_at_service


def _get_record(db: Session, record_id: int, user: User) -> ServiceRecord:
    record = db.scalar(select(ServiceRecord).where(ServiceRecord.id == record_id))
    if record is None:
        raise DomainException(
            code=ErrorCode.SERVICE_NOT_FOUND,
            message="Service record not found."
        )
    # Raises when the user does not own the vehicle.
    get_vehicle(db, record.vehicle_id, user)
    return record


def get_service_record(db: Session, record_id: int, user: User) -> ServiceRecord:
    return _get_record(db, record_id, user)


def list_service_records(
    db: Session,
    user: User,
    vehicle_id: int | None = None,
) -> list[ServiceRecord]:
    query = (
        select(ServiceRecord)
        .join(ServiceRecord.vehicle)
        .order_by(ServiceRecord.service_date.desc(), ServiceRecord.id.desc())
    )
    if vehicle_id is not None:
        get_vehicle(db, vehicle_id, user)
        query = query.where(ServiceRecord.vehicle_id == vehicle_id)
    if user.role != "admin":
        query = query.where(Vehicle.owner_id == user.id)
    return db.scalars(query).all()


def create_service_record(
    db: Session,
    user: User,
    vehicle_id: int,
    service_date: date,
    mileage_at_service: int,
    total_cost: float,
    notes: str | None = None,
    status: str = "pending",
    policy: DuePolicy = due_policy,
) -> ServiceRecord:
    """Record a service and recompute the vehicle's next service due."""
    vehicle = get_vehicle(db, vehicle_id, user)
    status = _validate_status(status)

    try:
        record = ServiceRecord(
            vehicle_id=vehicle.id,
            service_date=service_date,
            mileage_at_service=mileage_at_service,
            total_cost=total_cost,
            notes=notes,
            status=status,
            invoice_number=generate_invoice_number(db, service_date),
        )
        db.add(record)

        if status not in NON_RECOMPUTING_STATUSES:
            apply_service_to_vehicle(vehicle, record, policy)

        db.commit()
        db.refresh(record)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "Service record created",
        extra={
            "service_record_id": record.id,
            "vehicle_id": vehicle.id,
            "next_service_due": vehicle.next_service_due,
        },
    )
    return record


def update_service_status(
    db: Session,
    record_id: int,
    user: User,
    new_status: str,
    policy: DuePolicy = due_policy,
) -> ServiceRecord:
    """Change status; completing a service recomputes the vehicle's next service."""
    record = _get_record(db, record_id, user)
    new_status = _validate_status(new_status)

    try:
        completing = new_status == "completed" and record.status != "completed"
        record.status = new_status
        if completing:
            apply_service_to_vehicle(record.vehicle, record, policy)

        db.commit()
        db.refresh(record)
        return record
    except SQLAlchemyError:
        db.rollback()
        raise


def delete_service_record(db: Session, record_id: int, user: User) -> None:
    record = _get_record(db, record_id, user)
    try:
        db.delete(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
