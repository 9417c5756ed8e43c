"""Owner profile helpers."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vehicle_care.core.domain_exceptions import DomainException
from vehicle_care.core.error_codes import ErrorCode
from vehicle_care.db.models import User
from vehicle_care.intelligence.preferences import NotificationPreferences

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")


def get_user(db: Session, user_id: int) -> User:
    user = db.scalar(select(User).where(User.id == user_id))
    if user is None:
        raise DomainException(
            code=ErrorCode.USER_NOT_FOUND,
            message="User not found."
        )
    return user


def create_user(
    db: Session,
    username: str,
    email: str,
    phone: str | None = None,
    role: str = "user",
    notification_preferences: Mapping[str, Any] | None = None,
) -> User:
    if role not in ROLES:
        raise DomainException(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"Role must be one of: {', '.join(ROLES)}."
        )

    existing = db.scalar(select(User.id).where(User.email == email))
    if existing is not None:
        raise DomainException(
            code=ErrorCode.DUPLICATE_USER,
            message="A user with this email already exists."
        )

    preferences = NotificationPreferences.from_mapping(notification_preferences)
    user = User(
        username=username,
        email=email,
        phone=phone,
        role=role,
        notification_preferences=preferences.to_dict(),
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User created", extra={"user_id": user.id})
    return user


def update_notification_preferences(
    db: Session,
    user: User,
    changes: Mapping[str, Any],
) -> NotificationPreferences:
    """Merge ``changes`` into the stored preferences and return the effective set."""
    merged = dict(user.notification_preferences or {})
    merged.pop("inApp", None)
    merged.update(changes)
    if "inApp" in changes:
        merged["in_app"] = merged.pop("inApp")

    preferences = NotificationPreferences.from_mapping(merged)
    try:
        # Reassign so the JSON column is flagged dirty.
        user.notification_preferences = preferences.to_dict()
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        raise
    return preferences
