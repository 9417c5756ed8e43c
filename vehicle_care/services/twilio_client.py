"""Twilio client configuration for SMS reminders."""

import logging

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from vehicle_care.core.config import settings

logger = logging.getLogger(__name__)

if not settings.twilio_account_sid or not settings.twilio_auth_token:
    logger.warning(
        "Twilio credentials not set. SMS reminders will be reported as failed."
    )

client: Client | None = None
if settings.twilio_account_sid and settings.twilio_auth_token:
    client = Client(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        http_client=TwilioHttpClient(timeout=settings.sms_timeout_seconds),
    )


def send_sms(to: str, body: str) -> bool:
    """Send an SMS via Twilio. Returns False instead of raising on failure."""
    if client is None or not settings.twilio_from_number:
        logger.error("Twilio client is not configured; SMS to %s not sent.", to)
        return False

    if not to.startswith("+"):
        logger.error("Phone number %s is not in E.164 format; SMS not sent.", to)
        return False

    try:
        message = client.messages.create(
            from_=settings.twilio_from_number,
            to=to,
            body=body,
        )
    except (TwilioException, OSError):
        logger.exception("Failed to send SMS to %s", to)
        return False

    logger.info("SMS sent to %s (SID: %s)", to, message.sid)
    return True
