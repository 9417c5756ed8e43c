"""Fan-out of service-due reminders to an owner's enabled channels."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vehicle_care.db.models import Notification, User, Vehicle
from vehicle_care.intelligence.due_calculator import DueStatus
from vehicle_care.intelligence.preferences import CHANNELS, EMAIL, IN_APP, SMS, resolve_channels
from vehicle_care.services import email_client, realtime, twilio_client
from vehicle_care.services.message_templates import (
    service_due_in_app,
    service_reminder_email,
    service_reminder_sms,
)

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "new-notification"


class ChannelOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"
    DISABLED = "disabled"


@dataclass(frozen=True)
class Transports:
    send_email: Callable[[str, str, str], bool]
    send_sms: Callable[[str, str], bool]
    publish: Callable[[int, str, dict[str, Any]], Any]


def default_transports() -> Transports:
    return Transports(
        send_email=email_client.send_email,
        send_sms=twilio_client.send_sms,
        publish=realtime.publish_to_owner,
    )


@dataclass
class DispatchResult:
    vehicle_id: int
    status: DueStatus
    outcomes: dict[str, ChannelOutcome] = field(default_factory=dict)
    notification_id: int | None = None

    @property
    def delivered(self) -> bool:
        return any(outcome is ChannelOutcome.SENT for outcome in self.outcomes.values())

    @property
    def failed_channels(self) -> list[str]:
        return [
            channel
            for channel, outcome in self.outcomes.items()
            if outcome is ChannelOutcome.FAILED
        ]


def _email_channel(transports: Transports, owner: User, vehicle: Vehicle, status: DueStatus) -> ChannelOutcome:
    subject, html_body = service_reminder_email(owner, vehicle, status)
    try:
        sent = transports.send_email(owner.email, subject, html_body)
    except Exception:
        logger.exception("Email reminder for vehicle %d raised.", vehicle.id)
        return ChannelOutcome.FAILED
    return ChannelOutcome.SENT if sent else ChannelOutcome.FAILED


def _sms_channel(transports: Transports, owner: User, vehicle: Vehicle) -> ChannelOutcome:
    if not owner.phone:
        logger.info("Owner %d has SMS enabled but no phone on file. Skipping SMS.", owner.id)
        return ChannelOutcome.SKIPPED
    try:
        sent = transports.send_sms(owner.phone, service_reminder_sms(vehicle))
    except Exception:
        logger.exception("SMS reminder for vehicle %d raised.", vehicle.id)
        return ChannelOutcome.FAILED
    return ChannelOutcome.SENT if sent else ChannelOutcome.FAILED


def _in_app_channel(
    db: Session,
    transports: Transports,
    owner: User,
    vehicle: Vehicle,
) -> tuple[ChannelOutcome, int | None]:
    title, message = service_due_in_app(vehicle)
    notification = Notification(
        owner_id=owner.id,
        vehicle_id=vehicle.id,
        type="service_due",
        title=title,
        message=message,
        sent_via=IN_APP,
    )
    try:
        db.add(notification)
        db.commit()
        db.refresh(notification)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store in-app notification for vehicle %d.", vehicle.id)
        return ChannelOutcome.FAILED, None

    # The row is the delivery; a failed push only means no live session saw it.
    try:
        transports.publish(
            owner.id,
            NEW_NOTIFICATION_EVENT,
            {
                "id": notification.id,
                "vehicle_id": vehicle.id,
                "title": notification.title,
                "message": f"Vehicle {vehicle.plate_number} is due for service",
                "type": notification.type,
            },
        )
    except Exception:
        logger.exception("Real-time push for notification %d failed.", notification.id)

    return ChannelOutcome.SENT, notification.id


def dispatch_service_due(
    db: Session,
    vehicle: Vehicle,
    status: DueStatus,
    transports: Transports | None = None,
) -> DispatchResult:
    """Send one due-service reminder on every channel the owner has enabled.

    Each channel is attempted independently; the result carries one outcome per
    channel. Raises ValueError when the vehicle has no owner.
    """
    owner = vehicle.owner
    if owner is None:
        raise ValueError(f"Vehicle {vehicle.id} has no owner.")

    transports = transports or default_transports()
    enabled = resolve_channels(owner.notification_preferences)
    result = DispatchResult(
        vehicle_id=vehicle.id,
        status=status,
        outcomes={channel: ChannelOutcome.DISABLED for channel in CHANNELS},
    )

    if EMAIL in enabled:
        result.outcomes[EMAIL] = _email_channel(transports, owner, vehicle, status)

    if SMS in enabled:
        result.outcomes[SMS] = _sms_channel(transports, owner, vehicle)

    if IN_APP in enabled:
        result.outcomes[IN_APP], result.notification_id = _in_app_channel(
            db, transports, owner, vehicle
        )

    logger.info(
        "Dispatched %s reminder for vehicle %d: %s",
        status.value,
        vehicle.id,
        ", ".join(f"{channel}={outcome.value}" for channel, outcome in result.outcomes.items()),
    )
    return result
