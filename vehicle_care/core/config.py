"""Environment-driven settings and service-due thresholds."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env (for local development)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DuePolicy:
    """Thresholds used by the due calculator and the scheduled scans.

    ``scheduler_horizon_days`` and ``dashboard_horizon_days`` are kept apart on
    purpose: the daily scan flags dates 3 days out while the on-demand
    "due for service" list looks 7 days ahead.
    """

    service_interval_miles: int = 5000
    service_interval_days: int = 180
    due_soon_miles: int = 1000
    due_soon_days: int = 30
    scheduler_horizon_days: int = 3
    dashboard_horizon_days: int = 7
    upcoming_lead_days: int = 7
    scan_mileage_ratio: float = 0.9

    @classmethod
    def from_env(cls) -> "DuePolicy":
        defaults = cls()
        return cls(
            service_interval_miles=int(
                os.getenv("SERVICE_INTERVAL_MILES", defaults.service_interval_miles)
            ),
            service_interval_days=int(
                os.getenv("SERVICE_INTERVAL_DAYS", defaults.service_interval_days)
            ),
            due_soon_miles=int(os.getenv("DUE_SOON_MILES", defaults.due_soon_miles)),
            due_soon_days=int(os.getenv("DUE_SOON_DAYS", defaults.due_soon_days)),
            scheduler_horizon_days=int(
                os.getenv("SCHEDULER_HORIZON_DAYS", defaults.scheduler_horizon_days)
            ),
            dashboard_horizon_days=int(
                os.getenv("DASHBOARD_HORIZON_DAYS", defaults.dashboard_horizon_days)
            ),
            upcoming_lead_days=int(
                os.getenv("UPCOMING_LEAD_DAYS", defaults.upcoming_lead_days)
            ),
            scan_mileage_ratio=float(
                os.getenv("SCAN_MILEAGE_RATIO", defaults.scan_mileage_ratio)
            ),
        )


@dataclass(frozen=True)
class Settings:
    database_url: str
    smtp_host: str | None
    smtp_port: int
    smtp_user: str | None
    smtp_password: str | None
    smtp_from: str
    smtp_use_tls: bool
    smtp_timeout_seconds: float
    twilio_account_sid: str | None
    twilio_auth_token: str | None
    twilio_from_number: str | None
    sms_timeout_seconds: float
    scheduler_enabled: bool

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./vehicle_care.db"),
            smtp_host=os.getenv("SMTP_HOST"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=os.getenv("SMTP_USER"),
            smtp_password=os.getenv("SMTP_PASS"),
            smtp_from=os.getenv("SMTP_FROM", "no-reply@vehicle-care.local"),
            smtp_use_tls=_env_bool("SMTP_USE_TLS", True),
            smtp_timeout_seconds=float(os.getenv("SMTP_TIMEOUT_SECONDS", "10")),
            twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID"),
            twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN"),
            twilio_from_number=os.getenv("TWILIO_PHONE_NUMBER"),
            sms_timeout_seconds=float(os.getenv("SMS_TIMEOUT_SECONDS", "10")),
            scheduler_enabled=_env_bool("SCHEDULER_ENABLED", True),
        )


settings = Settings.from_env()
due_policy = DuePolicy.from_env()
