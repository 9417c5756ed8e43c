"""SMTP delivery for reminder and report emails."""

import logging
import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from vehicle_care.core.config import settings

logger = logging.getLogger(__name__)


def _html_to_text(html_body: str) -> str:
    # Plain-text fallback: templates keep one paragraph per line.
    return re.sub(r"<[^>]+>", "", html_body).strip()


def send_email(to: str, subject: str, html: str) -> bool:
    """Send an HTML email. Returns False instead of raising on failure."""
    if not settings.smtp_host:
        logger.error("SMTP_HOST is not configured; email to %s not sent.", to)
        return False

    if not to:
        logger.error("No recipient address; email %r not sent.", subject)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to

    msg.attach(MIMEText(_html_to_text(html), "plain"))
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(
            settings.smtp_host,
            settings.smtp_port,
            timeout=settings.smtp_timeout_seconds,
        ) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_password or "")
            server.sendmail(settings.smtp_from, [to], msg.as_string())
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send email %r to %s", subject, to)
        return False

    logger.info("Email %r sent to %s", subject, to)
    return True
