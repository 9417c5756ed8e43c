"""Owner-facing notification inbox operations.

Notifications are written only by the dispatcher; owners can read, mark and
delete their own rows. Another owner's row is reported as not found.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.db.models import Notification


def list_notifications(db: Session, owner_id: int, unread_only: bool = False) -> list[Notification]:
    query = (
        select(Notification)
        .where(Notification.owner_id == owner_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    return db.scalars(query).all()


def _get_owned(db: Session, owner_id: int, notification_id: int) -> Notification:
    notification = db.scalar(
        select(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.owner_id == owner_id)
    )
    if notification is None:
        raise DomainException(
            code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message="Notification not found."
        )
    return notification


def mark_as_read(db: Session, owner_id: int, notification_id: int) -> Notification:
    notification = _get_owned(db, owner_id, notification_id)
    try:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return notification
    except SQLAlchemyError:
        db.rollback()
        raise


def mark_all_as_read(db: Session, owner_id: int) -> int:
    """Mark every unread notification of the owner as read; returns rows changed."""
    try:
        result = db.execute(
            update(Notification)
            .where(Notification.owner_id == owner_id)
            .where(Notification.is_read.is_(False))
            .values(is_read=True)
        )
        db.commit()
        return result.rowcount or 0
    except SQLAlchemyError:
        db.rollback()
        raise


def delete_notification(db: Session, owner_id: int, notification_id: int) -> None:
    notification = _get_owned(db, owner_id, notification_id)
    try:
        db.delete(notification)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
